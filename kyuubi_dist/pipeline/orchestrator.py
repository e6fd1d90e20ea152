"""Maven build orchestrator collaborator.

The rest of the pipeline talks to Maven only through two operations:
``query`` evaluates one project property and ``invoke`` runs a build.
"""

import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kyuubi_dist.core.exceptions.errors import PreconditionError
from kyuubi_dist.core.logger.logger import get_logger

logger = get_logger(__name__)

# Lines carrying any of these markers are Maven log noise, not values
NOISE_MARKERS = ("INFO", "WARNING")


def filter_query_output(raw: str) -> str:
    """Extract a property value from raw ``help:evaluate`` output.

    Noise lines are dropped and the last remaining non-blank line is the
    value. Output without such a line yields an empty string.
    """
    candidates = [
        line.strip()
        for line in raw.splitlines()
        if line.strip() and not any(marker in line for marker in NOISE_MARKERS)
    ]
    return candidates[-1] if candidates else ""


@dataclass
class InvocationResult:
    """Result of a Maven invocation.

    Attributes:
        return_code: Exit code of the process.
        command: The command line that was executed.
        duration_seconds: Time taken by the invocation.
    """

    return_code: int
    command: list[str]
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.return_code == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "success": self.success,
            "return_code": self.return_code,
            "command": " ".join(self.command),
            "duration_seconds": self.duration_seconds,
        }


class MavenOrchestrator:
    """Runs Maven synchronously in the project root."""

    def __init__(
        self,
        executable: str,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            executable: Maven executable, a path or a name found on PATH.
            cwd: Project root the commands run in.
            env: Environment for every subprocess.
        """
        self.executable = executable
        self.cwd = cwd
        self.env = dict(env) if env is not None else None

    def resolve_executable(self) -> str | None:
        """Return the runnable path of the Maven executable, if any."""
        return shutil.which(self.executable)

    def ensure_available(self) -> str:
        """Check that Maven can be executed.

        Raises:
            PreconditionError: If the executable cannot be located.
        """
        resolved = self.resolve_executable()
        if resolved is None:
            raise PreconditionError(
                f"Could not locate Maven command: '{self.executable}'",
                requirement="maven",
                details={"executable": self.executable},
            )
        return resolved

    def query(self, expression: str, args: Sequence[str] = ()) -> str:
        """Evaluate one Maven expression.

        A failed process or output without a usable line yields "".

        Args:
            expression: Property to evaluate, e.g. ``project.version``.
            args: Pass-through arguments (profiles, -D overrides).

        Returns:
            The filtered value.
        """
        command = [self.executable, "help:evaluate", f"-Dexpression={expression}", *args]
        logger.debug(f"Querying {expression}: {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                cwd=self.cwd,
                env=self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                check=False,
            )
        except OSError as e:
            logger.warning(f"Query for {expression} could not be run: {e}")
            return ""

        value = filter_query_output(result.stdout or "")
        if result.returncode != 0:
            logger.debug(f"Query for {expression} exited with {result.returncode}")
        return value

    def invoke(self, args: Sequence[str]) -> InvocationResult:
        """Run a Maven build, streaming its output to the terminal.

        Args:
            args: Goals, profile flags and pass-through arguments.

        Returns:
            InvocationResult with the exit status.
        """
        command = [self.executable, *args]
        logger.info(f"Building with: {' '.join(command)}")

        start_time = time.time()
        try:
            completed = subprocess.run(command, cwd=self.cwd, env=self.env, check=False)
            return_code = completed.returncode
        except OSError as e:
            logger.error(f"Failed to start {self.executable}: {e}")
            return_code = 127

        result = InvocationResult(
            return_code=return_code,
            command=command,
            duration_seconds=time.time() - start_time,
        )
        if result.success:
            logger.info(f"Build completed successfully in {result.duration_seconds:.1f}s")
        else:
            logger.error(f"Build failed with code {result.return_code}")
        return result
