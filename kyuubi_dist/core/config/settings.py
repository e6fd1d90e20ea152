"""Application settings using Pydantic Settings."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kyuubi_dist.core.config.loader import ConfigLoader
from kyuubi_dist.core.exceptions.errors import ConfigurationError

DEFAULT_MAVEN_OPTS = "-Xmx2g -XX:ReservedCodeCacheSize=1g"


class DistSettings(BaseSettings):
    """Distribution layout settings."""

    model_config = SettingsConfigDict(
        env_prefix="KYUUBI_DIST_",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    home: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("KYUUBI_HOME", "KYUUBI_DIST_HOME"),
        description="Project root (None = current directory)",
    )
    dist_dir_name: str = Field(
        default="dist",
        description="Name of the distribution directory under the project root",
    )
    archive_prefix: str = Field(
        default="apache-kyuubi",
        description="Leading part of the archive and staging directory name",
    )
    product_name: str = Field(
        default="Kyuubi",
        description="Product name written into the RELEASE file",
    )
    download_dir: Path = Field(
        default=Path("externals/kyuubi-download/target"),
        description="Download cache holding binary runtime bundles, relative to home",
    )

    @field_validator("home", mode="before")
    @classmethod
    def validate_home(cls, v: str | None) -> Path | None:
        """Validate and convert home to Path."""
        if v is None or v == "":
            return None
        return Path(v)

    def resolve_home(self) -> Path:
        """Return the absolute project root."""
        return (self.home or Path.cwd()).resolve()


class OrchestratorSettings(BaseSettings):
    """Build orchestrator (Maven) settings."""

    model_config = SettingsConfigDict(
        env_prefix="KYUUBI_DIST_ORCHESTRATOR_",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_path: str = Field(
        default="build/mvn",
        description="Maven executable, relative to the project root unless absolute",
    )
    maven_opts: str = Field(
        default=DEFAULT_MAVEN_OPTS,
        validation_alias=AliasChoices("MAVEN_OPTS", "KYUUBI_DIST_ORCHESTRATOR_MAVEN_OPTS"),
        description="Memory and tuning flags exported as MAVEN_OPTS",
    )
    alternate_module: str = Field(
        default="externals/kyuubi-spark-sql-engine",
        description="Module rebuilt against the alternate Scala binary version",
    )

    @field_validator("maven_opts", mode="before")
    @classmethod
    def validate_maven_opts(cls, v: str | None) -> str:
        """Fall back to the default heap settings when MAVEN_OPTS is empty."""
        if v is None or not str(v).strip():
            return DEFAULT_MAVEN_OPTS
        return str(v)


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="KYUUBI_DIST_LOGGING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = Field(
        default="INFO",
        description="Log level",
    )
    format: str = Field(
        default="[%(name)s] %(message)s",
        description="Log format string",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    use_rich: bool = Field(
        default=True,
        description="Use Rich console for output",
    )

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: str | None) -> Path | None:
        """Validate and convert file to Path."""
        if v is None or v == "":
            return None
        return Path(v)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="KYUUBI_DIST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    dist: DistSettings = Field(default_factory=DistSettings)
    orchestrator: OrchestratorSettings = Field(default_factory=OrchestratorSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_yaml(cls, path: Path) -> "Settings":
        """Load settings from YAML file.

        Values from the file are applied on top of the environment.

        Args:
            path: Path to YAML configuration file.

        Returns:
            Settings instance with values from YAML.

        Raises:
            ConfigurationError: If the file cannot be read or holds invalid values.
        """
        loader = ConfigLoader(path)
        loader.load()

        try:
            return cls(
                dist=DistSettings(**loader.get_section("dist")),
                orchestrator=OrchestratorSettings(**loader.get_section("orchestrator")),
                logging=LoggingSettings(**loader.get_section("logging")),
            )
        except ValidationError as e:
            raise _invalid_settings(e, str(path)) from e

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from default locations.

        Priority: KYUUBI_DIST_CONFIG file > config/default.yaml > environment > defaults

        Returns:
            Settings instance.

        Raises:
            ConfigurationError: If a settings source is unreadable or invalid.
        """
        explicit = os.environ.get("KYUUBI_DIST_CONFIG")
        if explicit:
            return cls.from_yaml(Path(explicit))

        default_path = Path(__file__).parent.parent.parent.parent / "config" / "default.yaml"
        if default_path.exists():
            return cls.from_yaml(default_path)

        try:
            return cls()
        except ValidationError as e:
            raise _invalid_settings(e, "environment") from e


def _invalid_settings(error: ValidationError, source: str) -> ConfigurationError:
    first = error.errors()[0]
    key = ".".join(str(part) for part in first["loc"])
    return ConfigurationError(
        f"Invalid settings in {source}: {first['msg']}",
        config_key=key or None,
        details={"errors": error.error_count()},
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings singleton.
    """
    return Settings.load()
