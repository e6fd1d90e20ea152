"""Distribution pipeline wiring every stage in order."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kyuubi_dist.core.config.settings import Settings, get_settings
from kyuubi_dist.core.logger.logger import get_logger
from kyuubi_dist.models.archive import ArchiveSpec
from kyuubi_dist.models.config import BuildConfig
from kyuubi_dist.models.metadata import BuildMetadata
from kyuubi_dist.pipeline.archive import ArchivePackager, compute_archive_spec
from kyuubi_dist.pipeline.build_driver import BuildDriver, BuildOutcome
from kyuubi_dist.pipeline.environment import build_environment
from kyuubi_dist.pipeline.layout import AssemblyReport, LayoutAssembler, LayoutPlanner
from kyuubi_dist.pipeline.metadata import MetadataResolver
from kyuubi_dist.pipeline.orchestrator import MavenOrchestrator

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Values produced by a complete pipeline run."""

    config: BuildConfig
    metadata: BuildMetadata
    build: BuildOutcome
    layout: AssemblyReport
    archive_spec: ArchiveSpec | None = None
    archive_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for display."""
        return {
            "version": self.metadata.version,
            "scala_version": self.metadata.scala_version,
            "dist_dir": str(self.layout.root),
            "placed": len(self.layout.placed),
            "skipped": len(self.layout.skipped),
            "linked": self.layout.linked,
            "archive": str(self.archive_path) if self.archive_path else None,
        }


def default_orchestrator_path(settings: Settings) -> str:
    """Maven executable used when --mvn is not given."""
    path = Path(settings.orchestrator.default_path)
    if path.is_absolute():
        return str(path)
    return str(settings.dist.resolve_home() / path)


class DistributionPipeline:
    """Runs config-driven stages strictly in sequence, failing fast.

    Order: environment check, metadata, build, layout (with dedup),
    archive. Each stage only consumes what the previous ones returned.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        orchestrator: MavenOrchestrator | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Application settings. Uses global settings if not provided.
            orchestrator: Maven collaborator; built from the config when omitted.
            environ: Base environment for the subprocesses.
        """
        self.settings = settings or get_settings()
        self.home = self.settings.dist.resolve_home()
        self.orchestrator = orchestrator
        self.environ = os.environ if environ is None else environ

    @property
    def dist_dir(self) -> Path:
        return self.home / self.settings.dist.dist_dir_name

    @property
    def download_dir(self) -> Path:
        download = self.settings.dist.download_dir
        return download if download.is_absolute() else self.home / download

    def _orchestrator_for(self, config: BuildConfig) -> MavenOrchestrator:
        if self.orchestrator is not None:
            return self.orchestrator
        env = build_environment(self.settings.orchestrator, self.environ)
        return MavenOrchestrator(config.orchestrator_path, cwd=self.home, env=env)

    def run(self, config: BuildConfig) -> PipelineResult:
        """Run every stage for ``config``.

        Raises:
            DistError: The first failing stage's error; later stages do not run.
        """
        orchestrator = self._orchestrator_for(config)
        orchestrator.ensure_available()

        logger.info("Resolving build metadata")
        metadata = MetadataResolver(orchestrator, project_home=self.home).resolve(config)

        logger.info("Building the project")
        driver = BuildDriver(
            orchestrator,
            project_home=self.home,
            alternate_module=self.settings.orchestrator.alternate_module,
        )
        build = driver.run(config, metadata)

        logger.info(f"Assembling the distribution in {self.dist_dir}")
        planner = LayoutPlanner(
            project_home=self.home,
            dist_dir=self.dist_dir,
            download_dir=self.download_dir,
            product_name=self.settings.dist.product_name,
        )
        tree = planner.plan(config, metadata)
        layout = LayoutAssembler().assemble(tree)

        result = PipelineResult(config=config, metadata=metadata, build=build, layout=layout)

        if config.make_archive:
            spec = compute_archive_spec(config, metadata, prefix=self.settings.dist.archive_prefix)
            result.archive_spec = spec
            result.archive_path = ArchivePackager(self.home).package(self.dist_dir, spec)

        return result
