"""Build driver: runs the full Maven build and the alternate Scala engine build."""

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from kyuubi_dist.core.exceptions.errors import BuildError
from kyuubi_dist.core.logger.logger import get_logger
from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.metadata import BuildMetadata
from kyuubi_dist.pipeline.orchestrator import InvocationResult

logger = get_logger(__name__)

# Always passed: a distribution needs neither tests nor doc/source jars
DIST_FLAGS: tuple[str, ...] = (
    "-DskipTests",
    "-Dmaven.javadoc.skip=true",
    "-Dmaven.scaladoc.skip=true",
    "-Dmaven.source.skip",
)

WEB_UI_PROFILE = "-Pweb-ui"

ALTERNATE_ABI: dict[str, str] = {"2.12": "2.13", "2.13": "2.12"}

# Scala binary versions whose engine jars may linger in target/ from older builds
LEGACY_ABIS: tuple[str, ...] = ("2.11", "2.12", "2.13")

SCALA_PROFILE_PREFIX = "-Pscala-"


class Invoker(Protocol):
    """Anything able to run a build with arguments."""

    def invoke(self, args: Sequence[str]) -> InvocationResult: ...


def profile_flags(config: BuildConfig) -> list[str]:
    """Derive the Maven flags implied by the configuration."""
    flags = list(DIST_FLAGS)
    if config.enable_web_ui:
        flags.append(WEB_UI_PROFILE)
    for component in ProvidedComponent:
        if config.is_provided(component):
            flags.append(component.profile)
    return flags


def alternate_abi(scala_version: str) -> str | None:
    """Return the counterpart Scala binary version, None if unknown."""
    return ALTERNATE_ABI.get(scala_version)


def swap_abi(args: Sequence[str], primary: str, alternate: str) -> list[str]:
    """Swap every standalone mention of ``primary`` and ``alternate``.

    ``-Pscala-2.12`` becomes ``-Pscala-2.13`` and the reverse, while
    ``-Dspark.version=3.2.12`` is left alone. Applying the swap twice
    returns the original arguments.
    """
    if primary == alternate:
        return list(args)

    pattern = re.compile(
        r"(?<![\w.])(" + re.escape(primary) + "|" + re.escape(alternate) + r")(?![\w.])"
    )
    mapping = {primary: alternate, alternate: primary}
    return [pattern.sub(lambda m: mapping[m.group(1)], arg) for arg in args]


@dataclass
class BuildOutcome:
    """Invocations performed by the build driver."""

    primary: InvocationResult
    alternate: InvocationResult | None = None
    removed_stale: list[Path] = field(default_factory=list)


class BuildDriver:
    """Drives the two Maven invocations a distribution needs."""

    def __init__(
        self,
        orchestrator: Invoker,
        project_home: Path,
        alternate_module: str = "externals/kyuubi-spark-sql-engine",
    ) -> None:
        """Initialize the build driver.

        Args:
            orchestrator: Maven collaborator.
            project_home: Project root.
            alternate_module: Module rebuilt against the alternate Scala version.
        """
        self.orchestrator = orchestrator
        self.project_home = project_home
        self.alternate_module = alternate_module

    @property
    def alternate_artifact(self) -> str:
        return Path(self.alternate_module).name

    def remove_stale_artifacts(self) -> list[Path]:
        """Delete engine jars left behind by builds against other Scala versions.

        Raises:
            BuildError: If a stale jar cannot be removed.
        """
        target = self.project_home / self.alternate_module / "target"
        if not target.is_dir():
            return []

        removed: list[Path] = []
        for abi in LEGACY_ABIS:
            for jar in sorted(target.glob(f"{self.alternate_artifact}_{abi}-*.jar")):
                try:
                    jar.unlink()
                except OSError as e:
                    raise BuildError(
                        f"Failed to remove stale artifact: {jar}",
                        exit_code=1,
                        details={"error": str(e)},
                    ) from e
                removed.append(jar)

        if removed:
            logger.info(f"Removed {len(removed)} stale {self.alternate_artifact} jar(s)")
        return removed

    def _invoke(self, args: list[str], description: str) -> InvocationResult:
        result = self.orchestrator.invoke(args)
        if not result.success:
            raise BuildError(
                f"{description} failed with exit code {result.return_code}",
                exit_code=result.return_code,
                command=result.command,
            )
        return result

    def primary_args(self, config: BuildConfig) -> list[str]:
        return ["clean", "install", *profile_flags(config), *config.passthrough_args]

    def alternate_args(self, config: BuildConfig, primary_abi: str, other_abi: str) -> list[str]:
        swapped = swap_abi(config.passthrough_args, primary_abi, other_abi)
        if not any(arg.startswith(SCALA_PROFILE_PREFIX) for arg in swapped):
            swapped.append(f"{SCALA_PROFILE_PREFIX}{other_abi}")
        # No "clean": the primary Scala engine jar must survive next to the alternate one
        return [
            "install",
            *profile_flags(config),
            "-pl",
            self.alternate_module,
            "-am",
            *swapped,
        ]

    def run(self, config: BuildConfig, metadata: BuildMetadata) -> BuildOutcome:
        """Build the whole project, then the alternate Scala engine.

        Raises:
            BuildError: If either invocation fails. Artifacts of a
                successful first invocation are kept.
        """
        removed = self.remove_stale_artifacts()

        primary = self._invoke(self.primary_args(config), "Build")
        outcome = BuildOutcome(primary=primary, removed_stale=removed)

        other_abi = alternate_abi(metadata.scala_version)
        if other_abi is None:
            logger.warning(
                f"Unknown Scala binary version '{metadata.scala_version}', "
                f"skipping the alternate {self.alternate_artifact} build"
            )
            return outcome

        logger.info(f"Building {self.alternate_artifact} for Scala {other_abi}")
        outcome.alternate = self._invoke(
            self.alternate_args(config, metadata.scala_version, other_abi),
            f"Scala {other_abi} build of {self.alternate_artifact}",
        )
        return outcome
