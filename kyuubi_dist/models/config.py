"""Build configuration data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProvidedComponent(str, Enum):
    """Components that may be supplied by the deployment instead of bundled."""

    FLINK = "flink"
    SPARK = "spark"
    HIVE = "hive"

    @property
    def flag(self) -> str:
        """Command-line flag marking this component as provided."""
        return f"--{self.value}-provided"

    @property
    def profile(self) -> str:
        """Maven profile activated when this component is provided."""
        return f"-P{self.value}-provided"


class BuildConfig(BaseModel):
    """Immutable configuration resolved once from the command line."""

    model_config = ConfigDict(frozen=True)

    custom_name: str | None = Field(
        default=None,
        description="Custom distribution name used as the archive suffix",
    )
    make_archive: bool = Field(
        default=False,
        description="Produce a .tgz archive of the distribution",
    )
    enable_web_ui: bool = Field(
        default=False,
        description="Build and bundle the web UI",
    )
    provided: frozenset[ProvidedComponent] = Field(
        default_factory=frozenset,
        description="Components supplied externally, not bundled",
    )
    orchestrator_path: str = Field(
        description="Path to the Maven executable",
    )
    passthrough_args: tuple[str, ...] = Field(
        default=(),
        description="Opaque arguments forwarded to every Maven call",
    )

    def is_provided(self, component: ProvidedComponent) -> bool:
        """Check whether a component is marked as externally provided."""
        return component in self.provided
