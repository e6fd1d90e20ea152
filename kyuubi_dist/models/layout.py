"""Declarative description of a distribution directory tree."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class PlacementMode(str, Enum):
    """How a placement's source is transferred into the tree."""

    COPY_FILE = "copy_file"
    COPY_TREE = "copy_tree"
    COPY_MATCHING = "copy_matching"
    COPY_MATCHING_DIRS = "copy_matching_dirs"


@dataclass(frozen=True)
class Placement:
    """One artifact transfer from the build tree into the distribution.

    Attributes:
        source: File or directory in the build tree. For the matching modes
            this is the directory searched with ``pattern``.
        destination: Target path. A file path for COPY_FILE, the new
            directory for COPY_TREE, the receiving directory otherwise.
            COPY_MATCHING copies every matching entry, COPY_MATCHING_DIRS
            only matching directories.
        mode: Transfer mode.
        pattern: Glob applied to the entries of ``source`` (matching modes).
        required: Whether a missing source aborts the assembly.
    """

    source: Path
    destination: Path
    mode: PlacementMode = PlacementMode.COPY_FILE
    pattern: str | None = None
    required: bool = True


@dataclass(frozen=True)
class DedupGroup:
    """Link files of ``dependents`` that also exist in ``reference``."""

    reference: Path
    dependents: tuple[Path, ...]


@dataclass
class DistributionTree:
    """Ordered plan for a distribution directory.

    ``steps`` are applied in order after the skeleton ``directories`` are
    created and the ``files`` are written, so a DedupGroup always runs
    right after the placements that fill its directories.
    """

    root: Path
    directories: list[Path] = field(default_factory=list)
    files: dict[Path, str] = field(default_factory=dict)
    steps: list[Placement | DedupGroup] = field(default_factory=list)

    def add_directory(self, relative: str) -> Path:
        path = self.root / relative
        if path not in self.directories:
            self.directories.append(path)
        return path

    def add_file(self, relative: str, content: str) -> Path:
        path = self.root / relative
        self.files[path] = content
        return path

    def place(self, placement: Placement) -> None:
        self.steps.append(placement)

    def dedup(self, reference: Path, *dependents: Path) -> None:
        self.steps.append(DedupGroup(reference=reference, dependents=tuple(dependents)))

    @property
    def placements(self) -> list[Placement]:
        """All placements, without the dedup groups."""
        return [step for step in self.steps if isinstance(step, Placement)]

    @property
    def dedup_groups(self) -> list[DedupGroup]:
        return [step for step in self.steps if isinstance(step, DedupGroup)]
