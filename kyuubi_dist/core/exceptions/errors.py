"""Custom exception definitions for kyuubi-dist."""

from typing import Any


class DistError(Exception):
    """Base exception for all distribution build errors."""

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class UsageError(DistError):
    """Exception raised for malformed command-line flags."""

    def __init__(
        self,
        message: str,
        token: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize usage error.

        Args:
            message: Error message.
            token: Command-line token that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if token is not None:
            details["token"] = token
        super().__init__(message, details)


class HelpRequested(DistError):
    """Raised when --help is given; the caller prints usage and exits cleanly."""

    exit_code = 0

    def __init__(self) -> None:
        super().__init__("Help requested")


class PreconditionError(DistError):
    """Exception raised when the runtime environment is not usable."""

    def __init__(
        self,
        message: str,
        requirement: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize precondition error.

        Args:
            message: Error message.
            requirement: Name of the missing requirement (e.g. JAVA_HOME).
            details: Additional error details.
        """
        details = details or {}
        if requirement:
            details["requirement"] = requirement
        super().__init__(message, details)


class BuildError(DistError):
    """Exception raised when a build orchestrator invocation fails."""

    def __init__(
        self,
        message: str,
        exit_code: int,
        command: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize build error.

        Args:
            message: Error message.
            exit_code: Exit status of the failed invocation.
            command: Command line that was executed.
            details: Additional error details.
        """
        details = details or {}
        details["exit_code"] = exit_code
        if command:
            details["command"] = " ".join(command)
        super().__init__(message, details)
        # A zero exit status must never be propagated as a failure
        self.exit_code = exit_code or 1


class LayoutError(DistError):
    """Exception raised when a mandatory artifact cannot be placed."""

    def __init__(
        self,
        message: str,
        source_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize layout error.

        Args:
            message: Error message.
            source_path: Artifact path that was missing or unreadable.
            details: Additional error details.
        """
        details = details or {}
        if source_path:
            details["source_path"] = source_path
        super().__init__(message, details)


class ArchiveError(DistError):
    """Exception raised when the distribution archive cannot be written."""

    def __init__(
        self,
        message: str,
        archive_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize archive error.

        Args:
            message: Error message.
            archive_path: Path of the archive being written.
            details: Additional error details.
        """
        details = details or {}
        if archive_path:
            details["archive_path"] = archive_path
        super().__init__(message, details)


class ConfigurationError(DistError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)
