"""Exception definitions module."""

from kyuubi_dist.core.exceptions.errors import (
    ArchiveError,
    BuildError,
    ConfigurationError,
    DistError,
    HelpRequested,
    LayoutError,
    PreconditionError,
    UsageError,
)

__all__ = [
    "DistError",
    "UsageError",
    "HelpRequested",
    "PreconditionError",
    "BuildError",
    "LayoutError",
    "ArchiveError",
    "ConfigurationError",
]
