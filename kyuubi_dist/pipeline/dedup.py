"""Replace duplicate jars with relative links to one canonical copy."""

import os
from collections.abc import Iterable
from pathlib import Path

from kyuubi_dist.core.logger.logger import get_logger

logger = get_logger(__name__)


class DedupLinker:
    """Links files of dependent directories to a reference directory."""

    @staticmethod
    def _relative_target(reference_file: Path, dependent: Path) -> str:
        return os.path.relpath(reference_file, dependent)

    def link_directory(self, reference: Path, dependent: Path) -> int:
        """Link the files of ``dependent`` that also exist in ``reference``.

        Only names that are regular files in ``reference`` are considered,
        so nothing else in ``dependent`` is ever removed. An entry that
        already links to the right target is left untouched.

        Returns:
            Number of entries replaced by a link.
        """
        if not reference.is_dir() or not dependent.is_dir():
            return 0

        linked = 0
        for reference_file in sorted(reference.iterdir()):
            if reference_file.is_symlink() or not reference_file.is_file():
                continue

            entry = dependent / reference_file.name
            if not entry.exists() and not entry.is_symlink():
                continue
            if entry.is_dir() and not entry.is_symlink():
                continue

            target = self._relative_target(reference_file, dependent)
            if entry.is_symlink() and os.readlink(entry) == target:
                continue

            entry.unlink()
            entry.symlink_to(target)
            linked += 1

        if linked:
            logger.debug(f"Linked {linked} file(s) in {dependent} to {reference}")
        return linked

    def link(self, reference: Path, dependents: Iterable[Path]) -> int:
        """Deduplicate every dependent directory against ``reference``.

        Args:
            reference: Directory holding the canonical copies (jars/).
            dependents: Directories whose duplicates become links.

        Returns:
            Total number of links created.
        """
        return sum(self.link_directory(reference, dependent) for dependent in dependents)
