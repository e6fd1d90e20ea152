"""Build metadata resolution through Maven property queries."""

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from git import Repo
from git.exc import GitError, InvalidGitRepositoryError, NoSuchPathError

from kyuubi_dist.core.logger.logger import get_logger
from kyuubi_dist.models.config import BuildConfig
from kyuubi_dist.models.metadata import BuildMetadata

logger = get_logger(__name__)

VERSION_PROPERTY = "project.version"
JAVA_VERSION_PROPERTY = "java.version"
SCALA_VERSION_PROPERTY = "scala.binary.version"

# Component name -> Maven property holding its version
COMPONENT_PROPERTIES: dict[str, str] = {
    "flink": "flink.version",
    "spark": "spark.version",
    "hive": "hive.version",
    "hadoop": "hadoop.version",
}


class PropertySource(Protocol):
    """Anything able to evaluate a build property."""

    def query(self, expression: str, args: Sequence[str] = ()) -> str: ...


def resolve_git_revision(path: Path) -> str:
    """Return the short revision of the repository at ``path``, or ""."""
    try:
        repo = Repo(path)
        return repo.head.commit.hexsha[:7]
    except (InvalidGitRepositoryError, NoSuchPathError):
        return ""
    except (GitError, ValueError) as e:
        # ValueError: repository without any commit
        logger.debug(f"Could not read git revision of {path}: {e}")
        return ""


class MetadataResolver:
    """Resolves the version strings that name and describe artifacts."""

    def __init__(self, source: PropertySource, project_home: Path | None = None) -> None:
        """Initialize the resolver.

        Args:
            source: Orchestrator used for the property queries.
            project_home: Project root; enables the git revision lookup.
        """
        self.source = source
        self.project_home = project_home

    def _query(self, expression: str, config: BuildConfig) -> str:
        value = self.source.query(expression, config.passthrough_args)
        if not value:
            logger.warning(f"Could not resolve {expression}, using an empty value")
        else:
            logger.debug(f"{expression} = {value}")
        return value

    def resolve(self, config: BuildConfig) -> BuildMetadata:
        """Query every property once.

        Args:
            config: Build configuration providing the pass-through arguments.

        Returns:
            BuildMetadata; unresolved fields are empty strings.
        """
        version = self._query(VERSION_PROPERTY, config)
        java_version = self._query(JAVA_VERSION_PROPERTY, config)
        scala_version = self._query(SCALA_VERSION_PROPERTY, config)
        components = {
            name: self._query(prop, config) for name, prop in COMPONENT_PROPERTIES.items()
        }

        git_revision = resolve_git_revision(self.project_home) if self.project_home else ""

        metadata = BuildMetadata(
            version=version,
            java_version=java_version,
            scala_version=scala_version,
            component_versions=components,
            git_revision=git_revision,
        )
        logger.info(f"Resolved version {version or '<unknown>'} (Scala {scala_version or '<unknown>'})")
        return metadata
