"""Distribution layout: a pure planner and the I/O adapter applying its plan.

``LayoutPlanner`` decides what goes where and never touches the disk;
``LayoutAssembler`` destroys the previous tree and materializes the plan.
"""

import shutil
from dataclasses import dataclass, field
from pathlib import Path

from kyuubi_dist.core.exceptions.errors import LayoutError
from kyuubi_dist.core.logger.logger import get_logger
from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.layout import DedupGroup, DistributionTree, Placement, PlacementMode
from kyuubi_dist.models.metadata import BuildMetadata
from kyuubi_dist.pipeline.build_driver import alternate_abi
from kyuubi_dist.pipeline.dedup import DedupLinker

logger = get_logger(__name__)

SKELETON: tuple[str, ...] = (
    "pid",
    "logs",
    "work",
    "jars",
    "db-scripts",
    "beeline-jars",
    "web-ui",
)


@dataclass(frozen=True)
class EngineSpec:
    """An external query engine shipped under externals/engines/<name>."""

    name: str
    module: str
    ships_dependencies: bool = False


ENGINES: tuple[EngineSpec, ...] = (
    EngineSpec("flink", "kyuubi-flink-sql-engine"),
    EngineSpec("spark", "kyuubi-spark-sql-engine"),
    EngineSpec("trino", "kyuubi-trino-engine", ships_dependencies=True),
    EngineSpec("hive", "kyuubi-hive-sql-engine", ships_dependencies=True),
    EngineSpec("jdbc", "kyuubi-jdbc-engine", ships_dependencies=True),
    EngineSpec("chat", "kyuubi-chat-engine", ships_dependencies=True),
)

# Binary runtime bundles found in the download cache, bundled unless provided
RUNTIME_BUNDLES: tuple[tuple[ProvidedComponent, str], ...] = (
    (ProvidedComponent.FLINK, "flink-*"),
    (ProvidedComponent.SPARK, "spark-*"),
    (ProvidedComponent.HIVE, "apache-hive-*"),
)

SPARK_EXTENSION_VERSIONS: tuple[str, ...] = ("3-1", "3-2", "3-3", "3-4", "3-5")

AUXILIARY_DIRS: tuple[str, ...] = ("bin", "conf", "docker", "charts")

LICENSE_FILES: tuple[tuple[str, str], ...] = (
    ("LICENSE-binary", "LICENSE"),
    ("NOTICE-binary", "NOTICE"),
)


def render_release(product_name: str, config: BuildConfig, metadata: BuildMetadata) -> str:
    """Render the RELEASE manifest written into the distribution root."""
    revision = f" (git revision {metadata.git_revision})" if metadata.git_revision else ""
    lines = [
        f"{product_name} {metadata.version}{revision} built for",
        f"Java {metadata.java_version}",
        f"Scala {metadata.scala_version}",
        f"Flink {metadata.component_version('flink')}",
        f"Spark {metadata.component_version('spark')}",
        f"{product_name} Hadoop {metadata.component_version('hadoop')}",
        f"Hive {metadata.component_version('hive')}",
        f"Build flags: {' '.join(config.passthrough_args)}",
    ]
    return "\n".join(lines) + "\n"


class LayoutPlanner:
    """Computes the DistributionTree for a resolved build."""

    def __init__(
        self,
        project_home: Path,
        dist_dir: Path,
        download_dir: Path | None = None,
        product_name: str = "Kyuubi",
    ) -> None:
        """Initialize the planner.

        Args:
            project_home: Project root holding the build outputs.
            dist_dir: Distribution directory to produce.
            download_dir: Download cache of runtime bundles.
            product_name: Product name used in the RELEASE file.
        """
        self.home = project_home
        self.dist_dir = dist_dir
        self.download_dir = download_dir or project_home / "externals/kyuubi-download/target"
        self.product_name = product_name

    def plan(self, config: BuildConfig, metadata: BuildMetadata) -> DistributionTree:
        tree = DistributionTree(root=self.dist_dir)
        for name in SKELETON:
            tree.add_directory(name)
        for engine in ENGINES:
            tree.add_directory(f"externals/engines/{engine.name}")

        tree.add_file("RELEASE", render_release(self.product_name, config, metadata))

        self._plan_server(tree, metadata)
        self._plan_beeline(tree)
        if config.enable_web_ui:
            self._plan_web_ui(tree)
        self._plan_engines(tree, metadata)
        self._plan_extensions(tree, metadata)
        self._plan_runtime_bundles(tree, config)
        self._plan_static_assets(tree)
        return tree

    def _plan_server(self, tree: DistributionTree, metadata: BuildMetadata) -> None:
        server = self.home / "kyuubi-server"
        tree.place(
            Placement(
                source=server / "target" / f"scala-{metadata.scala_version}" / "jars",
                destination=tree.root / "jars",
                mode=PlacementMode.COPY_MATCHING,
                pattern="*.jar",
            )
        )
        tree.place(
            Placement(
                source=server / "src/main/resources/sql",
                destination=tree.root / "db-scripts",
                mode=PlacementMode.COPY_MATCHING,
                pattern="*",
            )
        )

    def _plan_beeline(self, tree: DistributionTree) -> None:
        target = self.home / "kyuubi-hive-beeline" / "target"
        beeline_jars = tree.root / "beeline-jars"
        for source in (target, target / "jars"):
            tree.place(
                Placement(
                    source=source,
                    destination=beeline_jars,
                    mode=PlacementMode.COPY_MATCHING,
                    pattern="*.jar",
                )
            )
        tree.dedup(tree.root / "jars", beeline_jars)

    def _plan_web_ui(self, tree: DistributionTree) -> None:
        tree.place(
            Placement(
                source=self.home / "kyuubi-server/web-ui/dist",
                destination=tree.root / "web-ui",
                mode=PlacementMode.COPY_MATCHING,
                pattern="*",
                required=False,
            )
        )

    def _engine_jar(self, engine: EngineSpec, scala_version: str, version: str) -> Path:
        return (
            self.home
            / "externals"
            / engine.module
            / "target"
            / f"{engine.module}_{scala_version}-{version}.jar"
        )

    def _plan_engines(self, tree: DistributionTree, metadata: BuildMetadata) -> None:
        linked: list[Path] = []
        for engine in ENGINES:
            destination = tree.root / "externals" / "engines" / engine.name
            jar = self._engine_jar(engine, metadata.scala_version, metadata.version)
            tree.place(Placement(source=jar, destination=destination / jar.name))

            if engine.name == "spark":
                other_abi = alternate_abi(metadata.scala_version)
                if other_abi:
                    alt_jar = self._engine_jar(engine, other_abi, metadata.version)
                    tree.place(
                        Placement(
                            source=alt_jar,
                            destination=destination / alt_jar.name,
                            required=False,
                        )
                    )

            if engine.ships_dependencies:
                tree.place(
                    Placement(
                        source=self.home
                        / "externals"
                        / engine.module
                        / "target"
                        / f"scala-{metadata.scala_version}"
                        / "jars",
                        destination=destination,
                        mode=PlacementMode.COPY_MATCHING,
                        pattern="*.jar",
                        required=False,
                    )
                )
                linked.append(destination)

        tree.dedup(tree.root / "jars", *linked)

    def _plan_extensions(self, tree: DistributionTree, metadata: BuildMetadata) -> None:
        for spark_version in SPARK_EXTENSION_VERSIONS:
            module = f"kyuubi-extension-spark-{spark_version}"
            jar_name = f"{module}_{metadata.scala_version}-{metadata.version}.jar"
            tree.place(
                Placement(
                    source=self.home / "extensions/spark" / module / "target" / jar_name,
                    destination=tree.root / "extension" / jar_name,
                    required=False,
                )
            )

    def _plan_runtime_bundles(self, tree: DistributionTree, config: BuildConfig) -> None:
        for component, pattern in RUNTIME_BUNDLES:
            if config.is_provided(component):
                logger.info(f"{component.value} is provided, not bundling its binary")
                continue
            tree.place(
                Placement(
                    source=self.download_dir,
                    destination=tree.root / "externals",
                    mode=PlacementMode.COPY_MATCHING_DIRS,
                    pattern=pattern,
                    required=False,
                )
            )

    def _plan_static_assets(self, tree: DistributionTree) -> None:
        for source_name, target_name in LICENSE_FILES:
            tree.place(
                Placement(
                    source=self.home / source_name,
                    destination=tree.root / target_name,
                    required=False,
                )
            )
        tree.place(
            Placement(
                source=self.home / "licenses-binary",
                destination=tree.root / "licenses",
                mode=PlacementMode.COPY_TREE,
                required=False,
            )
        )
        for name in AUXILIARY_DIRS:
            tree.place(
                Placement(
                    source=self.home / name,
                    destination=tree.root / name,
                    mode=PlacementMode.COPY_TREE,
                    required=False,
                )
            )


@dataclass
class AssemblyReport:
    """What the assembler did to the distribution directory."""

    root: Path
    placed: list[Placement] = field(default_factory=list)
    skipped: list[Placement] = field(default_factory=list)
    linked: int = 0


class LayoutAssembler:
    """Materializes a DistributionTree on disk."""

    def __init__(self, linker: DedupLinker | None = None) -> None:
        self.linker = linker or DedupLinker()

    @staticmethod
    def reset(root: Path) -> None:
        """Destroy any previous distribution at ``root``."""
        if root.is_symlink() or root.is_file():
            root.unlink()
        elif root.exists():
            logger.info(f"Removing previous distribution at {root}")
            shutil.rmtree(root)

    def assemble(self, tree: DistributionTree) -> AssemblyReport:
        """Rebuild the distribution directory from scratch.

        Raises:
            LayoutError: If a required artifact is missing or cannot be copied.
        """
        self.reset(tree.root)

        for directory in tree.directories:
            directory.mkdir(parents=True, exist_ok=True)
        for path, content in tree.files.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        report = AssemblyReport(root=tree.root)
        for step in tree.steps:
            if isinstance(step, DedupGroup):
                report.linked += self.linker.link(step.reference, step.dependents)
            elif self._apply(step):
                report.placed.append(step)
            else:
                report.skipped.append(step)

        logger.info(
            f"Assembled {tree.root}: {len(report.placed)} placement(s), "
            f"{len(report.skipped)} skipped, {report.linked} link(s)"
        )
        return report

    def _missing(self, placement: Placement, reason: str) -> bool:
        if placement.required:
            raise LayoutError(
                f"Required artifact missing: {reason}",
                source_path=str(placement.source),
            )
        logger.warning(f"Skipping optional artifact: {reason}")
        return False

    def _apply(self, placement: Placement) -> bool:
        try:
            return self._transfer(placement)
        except OSError as e:
            raise LayoutError(
                f"Failed to copy {placement.source} to {placement.destination}",
                source_path=str(placement.source),
                details={"error": str(e)},
            ) from e

    def _transfer(self, placement: Placement) -> bool:
        source = placement.source
        destination = placement.destination

        if placement.mode is PlacementMode.COPY_FILE:
            if not source.is_file():
                return self._missing(placement, str(source))
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, destination)
            return True

        if placement.mode is PlacementMode.COPY_TREE:
            if not source.is_dir():
                return self._missing(placement, str(source))
            shutil.copytree(source, destination, symlinks=True, dirs_exist_ok=True)
            return True

        pattern = placement.pattern or "*"
        matches = sorted(source.glob(pattern)) if source.is_dir() else []
        if placement.mode is PlacementMode.COPY_MATCHING_DIRS:
            matches = [match for match in matches if match.is_dir()]
        if not matches:
            return self._missing(placement, f"no '{pattern}' under {source}")

        destination.mkdir(parents=True, exist_ok=True)
        for match in matches:
            if match.is_dir():
                shutil.copytree(match, destination / match.name, symlinks=True, dirs_exist_ok=True)
            else:
                shutil.copy2(match, destination / match.name)
        return True
