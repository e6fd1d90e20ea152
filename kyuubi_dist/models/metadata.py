"""Build metadata resolved from the build orchestrator."""

from pydantic import BaseModel, ConfigDict, Field


class BuildMetadata(BaseModel):
    """Version and platform strings used to name and describe artifacts.

    Every field may be empty when its query produced no usable output.
    """

    model_config = ConfigDict(frozen=True)

    version: str = Field(default="", description="Distribution version (project.version)")
    java_version: str = Field(default="", description="Java language level")
    scala_version: str = Field(default="", description="Scala binary version (runtime ABI)")
    component_versions: dict[str, str] = Field(
        default_factory=dict,
        description="Dependency component name to version",
    )
    git_revision: str = Field(default="", description="Short source-control revision")

    def component_version(self, name: str) -> str:
        """Return the resolved version of a component, empty if unknown."""
        return self.component_versions.get(name, "")
