"""Runtime environment resolution for the build orchestrator."""

import os
import shutil
import subprocess
from collections.abc import Mapping
from pathlib import Path

from kyuubi_dist.core.config.settings import OrchestratorSettings
from kyuubi_dist.core.exceptions.errors import PreconditionError
from kyuubi_dist.core.logger.logger import get_logger

logger = get_logger(__name__)

RPM_JAVA_HOME_MACRO = "%java_home"


def _java_home_from_rpm() -> str | None:
    rpm = shutil.which("rpm")
    if rpm is None:
        return None

    try:
        result = subprocess.run(
            [rpm, "-E", RPM_JAVA_HOME_MACRO],
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as e:
        logger.debug(f"rpm lookup failed: {e}")
        return None

    value = result.stdout.strip()
    # rpm echoes the macro back unchanged when it is undefined
    if result.returncode != 0 or not value or value == RPM_JAVA_HOME_MACRO:
        return None
    return value


def _java_home_from_path() -> str | None:
    java = shutil.which("java")
    if java is None:
        return None
    # /usr/lib/jvm/x/bin/java -> /usr/lib/jvm/x
    return str(Path(java).resolve().parent.parent)


def resolve_java_home(environ: Mapping[str, str] | None = None) -> str:
    """Resolve the Java installation used by the build.

    Lookup order: JAVA_HOME, the rpm %java_home macro, the install root of
    the java executable found on PATH.

    Raises:
        PreconditionError: If no Java installation can be found.
    """
    environ = os.environ if environ is None else environ

    java_home = environ.get("JAVA_HOME")
    if java_home:
        return java_home

    java_home = _java_home_from_rpm()
    if java_home:
        logger.info(f"No JAVA_HOME set, proceeding with '{java_home}' learned from rpm")
        return java_home

    java_home = _java_home_from_path()
    if java_home:
        logger.info(f"No JAVA_HOME set, proceeding with '{java_home}' learned from PATH")
        return java_home

    raise PreconditionError(
        "JAVA_HOME is not set, cannot proceed",
        requirement="JAVA_HOME",
    )


def build_environment(
    settings: OrchestratorSettings,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build the subprocess environment for every orchestrator call.

    Args:
        settings: Orchestrator settings holding the resolved MAVEN_OPTS.
        environ: Base environment. Defaults to the process environment.

    Returns:
        A copy of the base environment with JAVA_HOME and MAVEN_OPTS set.
    """
    environ = os.environ if environ is None else environ
    env = dict(environ)
    env["JAVA_HOME"] = resolve_java_home(environ)
    env["MAVEN_OPTS"] = settings.maven_opts
    return env
