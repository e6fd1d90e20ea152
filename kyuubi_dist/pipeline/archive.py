"""Archive packaging: staging directory plus a reproducible gzip tarball."""

import gzip
import os
import shutil
import tarfile
from pathlib import Path

from kyuubi_dist.core.exceptions.errors import ArchiveError
from kyuubi_dist.core.logger.logger import get_logger
from kyuubi_dist.models.archive import ArchiveSpec
from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.metadata import BuildMetadata

logger = get_logger(__name__)

ARCHIVE_EXTENSION = ".tgz"

# Component whose version names the archive when no custom name is given
NAMING_COMPONENT = ProvidedComponent.SPARK


def archive_suffix(config: BuildConfig, metadata: BuildMetadata) -> str:
    """Compute the descriptive suffix of the archive name.

    A custom name wins; otherwise the suffix carries the major.minor of the
    bundled Spark, and is empty when Spark is provided.
    """
    if config.custom_name is not None:
        return f"-{config.custom_name}"
    if config.is_provided(NAMING_COMPONENT):
        return ""
    version = metadata.component_version(NAMING_COMPONENT.value)
    return f"-{NAMING_COMPONENT.value}-{version[:3]}"


def compute_archive_spec(
    config: BuildConfig,
    metadata: BuildMetadata,
    prefix: str = "apache-kyuubi",
) -> ArchiveSpec:
    """Derive the staging directory and archive names."""
    staging = f"{prefix}-{metadata.version}-bin{archive_suffix(config, metadata)}"
    return ArchiveSpec(
        staging_dir_name=staging,
        output_file_name=f"{staging}{ARCHIVE_EXTENSION}",
    )


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    # Drop owner and timestamps so the archive does not depend on the build host
    info.uid = 0
    info.gid = 0
    info.uname = ""
    info.gname = ""
    info.mtime = 0
    info.pax_headers = {}
    return info


class ArchivePackager:
    """Stages a distribution under its versioned name and compresses it."""

    def __init__(self, output_dir: Path) -> None:
        """Initialize the packager.

        Args:
            output_dir: Directory receiving the staging directory and archive.
        """
        self.output_dir = output_dir

    def _add_tree(self, tar: tarfile.TarFile, staging: Path, arcname: str) -> None:
        tar.add(staging, arcname=arcname, recursive=False, filter=_normalize)
        for current, dirs, files in os.walk(staging):
            dirs.sort()
            base = Path(current)
            rel = base.relative_to(staging)
            for name in sorted([*dirs, *files]):
                member = base / name
                member_arcname = str(Path(arcname) / rel / name)
                tar.add(member, arcname=member_arcname, recursive=False, filter=_normalize)

    def _compress(self, staging: Path, archive: Path, arcname: str) -> None:
        with open(archive, "wb") as raw:
            with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
                with tarfile.open(fileobj=gz, mode="w", format=tarfile.GNU_FORMAT) as tar:
                    self._add_tree(tar, staging, arcname)

    def package(self, dist_dir: Path, spec: ArchiveSpec) -> Path:
        """Copy ``dist_dir`` into the staging directory and compress it.

        The staging directory is always removed, also when compression fails.

        Raises:
            ArchiveError: If staging or compression fails.

        Returns:
            Path of the written archive.
        """
        staging = self.output_dir / spec.staging_dir_name
        archive = self.output_dir / spec.output_file_name

        try:
            if staging.exists():
                shutil.rmtree(staging)
            shutil.copytree(dist_dir, staging, symlinks=True)
            if archive.exists():
                archive.unlink()
            logger.info(f"Compressing {staging.name} into {archive}")
            self._compress(staging, archive, spec.staging_dir_name)
        except (OSError, tarfile.TarError) as e:
            if archive.exists():
                archive.unlink()
            raise ArchiveError(
                f"Failed to create archive {archive.name}",
                archive_path=str(archive),
                details={"error": str(e)},
            ) from e
        finally:
            shutil.rmtree(staging, ignore_errors=True)

        logger.info(f"The tarball {archive.name} is successfully generated in {self.output_dir}")
        return archive
