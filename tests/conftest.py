"""Pytest configuration and shared fixtures."""

import logging
import shutil
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Generator

import pytest

from kyuubi_dist.core.config.settings import (
    DistSettings,
    LoggingSettings,
    OrchestratorSettings,
    Settings,
    get_settings,
)
from kyuubi_dist.models.config import BuildConfig
from kyuubi_dist.pipeline.orchestrator import InvocationResult

VERSION = "1.9.0"
SCALA = "2.12"

DEFAULT_PROPERTIES = {
    "project.version": VERSION,
    "java.version": "1.8",
    "scala.binary.version": SCALA,
    "flink.version": "1.18.1",
    "spark.version": "3.5.1",
    "hive.version": "3.1.3",
    "hadoop.version": "3.3.6",
}

ENGINE_MODULES = {
    "flink": "kyuubi-flink-sql-engine",
    "spark": "kyuubi-spark-sql-engine",
    "trino": "kyuubi-trino-engine",
    "hive": "kyuubi-hive-sql-engine",
    "jdbc": "kyuubi-jdbc-engine",
    "chat": "kyuubi-chat-engine",
}


def _touch(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content or path.name)
    return path


def make_fake_project(home: Path, version: str = VERSION, scala: str = SCALA) -> Path:
    """Lay out the build outputs a successful Maven build leaves behind.

    Args:
        home: Project root to populate.
        version: Project version embedded in artifact names.
        scala: Primary Scala binary version.

    Returns:
        The project root.
    """
    server_jars = home / "kyuubi-server" / "target" / f"scala-{scala}" / "jars"
    for name in (f"kyuubi-server_{scala}-{version}.jar", "guava-32.1.3.jar", "commons-lang3-3.13.0.jar"):
        _touch(server_jars / name, f"server:{name}")

    _touch(home / "kyuubi-server/src/main/resources/sql/mysql/schema.sql", "CREATE TABLE t(x INT);")
    _touch(home / "kyuubi-server/src/main/resources/sql/derby/schema.sql", "CREATE TABLE t(x INT);")

    beeline = home / "kyuubi-hive-beeline" / "target"
    _touch(beeline / f"kyuubi-hive-beeline-{version}.jar")
    _touch(beeline / "jars" / "guava-32.1.3.jar", "beeline copy")
    _touch(beeline / "jars" / "jline-2.14.6.jar")

    for name, module in ENGINE_MODULES.items():
        target = home / "externals" / module / "target"
        _touch(target / f"{module}_{scala}-{version}.jar")
        if name in ("trino", "hive", "jdbc", "chat"):
            _touch(target / f"scala-{scala}" / "jars" / "guava-32.1.3.jar", f"{name} copy")
            _touch(target / f"scala-{scala}" / "jars" / f"{name}-client.jar")

    alternate = "2.13" if scala == "2.12" else "2.12"
    _touch(
        home / "externals/kyuubi-spark-sql-engine/target"
        / f"kyuubi-spark-sql-engine_{alternate}-{version}.jar"
    )

    _touch(
        home / "extensions/spark/kyuubi-extension-spark-3-5/target"
        / f"kyuubi-extension-spark-3-5_{scala}-{version}.jar"
    )

    download = home / "externals/kyuubi-download/target"
    _touch(download / "spark-3.5.1-bin-hadoop3" / "bin" / "spark-submit")
    _touch(download / "flink-1.18.1" / "bin" / "flink")
    _touch(download / "apache-hive-3.1.3-bin" / "bin" / "hive")
    _touch(download / "spark-3.5.1-bin-hadoop3.tgz")

    _touch(home / "bin" / "kyuubi", "#!/usr/bin/env bash\n")
    _touch(home / "conf" / "kyuubi-defaults.conf.template")
    _touch(home / "LICENSE-binary")
    _touch(home / "NOTICE-binary")
    _touch(home / "licenses-binary" / "LICENSE-jline.txt")
    return home


class FakeOrchestrator:
    """Stands in for Maven: answers queries from a dict and records builds."""

    def __init__(
        self,
        properties: dict[str, str] | None = None,
        return_codes: Sequence[int] = (),
        on_invoke: Callable[[list[str]], None] | None = None,
        available: bool = True,
    ) -> None:
        self.properties = dict(DEFAULT_PROPERTIES if properties is None else properties)
        self.return_codes = list(return_codes)
        self.on_invoke = on_invoke
        self.available = available
        self.queries: list[tuple[str, tuple[str, ...]]] = []
        self.invocations: list[list[str]] = []

    def ensure_available(self) -> str:
        from kyuubi_dist.core.exceptions.errors import PreconditionError

        if not self.available:
            raise PreconditionError("Could not locate Maven command: 'mvn'", requirement="maven")
        return "mvn"

    def query(self, expression: str, args: Sequence[str] = ()) -> str:
        self.queries.append((expression, tuple(args)))
        return self.properties.get(expression, "")

    def invoke(self, args: Sequence[str]) -> InvocationResult:
        args = list(args)
        self.invocations.append(args)
        code = self.return_codes[len(self.invocations) - 1] if len(self.return_codes) >= len(self.invocations) else 0
        if code == 0 and self.on_invoke is not None:
            self.on_invoke(args)
        return InvocationResult(return_code=code, command=["mvn", *args])


@pytest.fixture(autouse=True)
def isolated_settings() -> Generator[None, None, None]:
    """Reset cached settings and root logging handlers around each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory that is cleaned up after the test.

    Yields:
        Path to the temporary directory.
    """
    temp_path = Path(tempfile.mkdtemp()).resolve()
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def project_home(temp_dir: Path) -> Path:
    """Project root holding the outputs of a completed build."""
    home = temp_dir / "kyuubi"
    home.mkdir()
    return make_fake_project(home)


@pytest.fixture
def settings(project_home: Path) -> Settings:
    """Settings pointing at the fake project root."""
    return Settings(
        dist=DistSettings(home=project_home),
        orchestrator=OrchestratorSettings(maven_opts="-Xmx1g"),
        logging=LoggingSettings(use_rich=False),
    )


@pytest.fixture
def fake_orchestrator() -> FakeOrchestrator:
    return FakeOrchestrator()


@pytest.fixture
def build_config() -> BuildConfig:
    """Default configuration: no archive, nothing provided."""
    return BuildConfig(orchestrator_path="mvn")


@pytest.fixture
def orchestrator_factory() -> type[FakeOrchestrator]:
    """The fake Maven class, for tests needing custom answers or exit codes."""
    return FakeOrchestrator


@pytest.fixture
def project_factory() -> Callable[..., Path]:
    """Populates additional fake project roots."""
    return make_fake_project
