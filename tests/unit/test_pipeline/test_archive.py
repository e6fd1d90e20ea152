"""Tests for archive naming and packaging."""

import tarfile
from pathlib import Path
from unittest.mock import patch

import pytest

from kyuubi_dist.core.exceptions.errors import ArchiveError
from kyuubi_dist.models.archive import ArchiveSpec
from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.metadata import BuildMetadata
from kyuubi_dist.pipeline.archive import ArchivePackager, archive_suffix, compute_archive_spec

METADATA = BuildMetadata(version="1.9.0", component_versions={"spark": "3.5.1"})


class TestArchiveNaming:
    """Tests for the archive suffix rules."""

    def test_spark_version_suffix(self, build_config: BuildConfig) -> None:
        assert archive_suffix(build_config, METADATA) == "-spark-3.5"

    def test_custom_name_wins(self) -> None:
        """Test a custom name overrides the Spark suffix, even when provided."""
        config = BuildConfig(
            orchestrator_path="mvn",
            custom_name="custom1",
            provided=frozenset({ProvidedComponent.SPARK}),
        )
        assert archive_suffix(config, METADATA) == "-custom1"

    def test_spark_provided_has_no_suffix(self) -> None:
        config = BuildConfig(orchestrator_path="mvn", provided=frozenset({ProvidedComponent.SPARK}))
        assert archive_suffix(config, METADATA) == ""

    def test_other_provided_keeps_suffix(self) -> None:
        config = BuildConfig(orchestrator_path="mvn", provided=frozenset({ProvidedComponent.FLINK}))
        assert archive_suffix(config, METADATA) == "-spark-3.5"

    def test_archive_spec(self, build_config: BuildConfig) -> None:
        """Test the staging directory and file names."""
        spec = compute_archive_spec(build_config, METADATA)

        assert spec.staging_dir_name == "apache-kyuubi-1.9.0-bin-spark-3.5"
        assert spec.output_file_name == "apache-kyuubi-1.9.0-bin-spark-3.5.tgz"

    def test_archive_spec_custom_name(self) -> None:
        config = BuildConfig(orchestrator_path="mvn", custom_name="custom1")
        assert compute_archive_spec(config, METADATA).output_file_name == "apache-kyuubi-1.9.0-bin-custom1.tgz"


@pytest.fixture
def dist_dir(temp_dir: Path) -> Path:
    dist = temp_dir / "dist"
    (dist / "jars").mkdir(parents=True)
    (dist / "beeline-jars").mkdir()
    (dist / "logs").mkdir()
    (dist / "jars" / "guava.jar").write_text("guava")
    (dist / "beeline-jars" / "guava.jar").symlink_to("../jars/guava.jar")
    (dist / "RELEASE").write_text("Kyuubi 1.9.0 built for\n")
    return dist


SPEC = ArchiveSpec(
    staging_dir_name="apache-kyuubi-1.9.0-bin-spark-3.5",
    output_file_name="apache-kyuubi-1.9.0-bin-spark-3.5.tgz",
)


class TestArchivePackager:
    """Tests for ArchivePackager."""

    def test_archive_rooted_at_staging_name(self, temp_dir: Path, dist_dir: Path) -> None:
        """Test every entry sits under the staging directory name."""
        archive = ArchivePackager(temp_dir).package(dist_dir, SPEC)

        assert archive == temp_dir / SPEC.output_file_name
        with tarfile.open(archive, "r:gz") as tar:
            names = tar.getnames()
            link = tar.getmember(f"{SPEC.staging_dir_name}/beeline-jars/guava.jar")

        assert all(name.split("/")[0] == SPEC.staging_dir_name for name in names)
        assert f"{SPEC.staging_dir_name}/RELEASE" in names
        assert f"{SPEC.staging_dir_name}/logs" in names
        assert link.issym()
        assert link.linkname == "../jars/guava.jar"

    def test_entries_are_normalized(self, temp_dir: Path, dist_dir: Path) -> None:
        archive = ArchivePackager(temp_dir).package(dist_dir, SPEC)

        with tarfile.open(archive, "r:gz") as tar:
            members = tar.getmembers()

        assert all(m.uid == 0 and m.gid == 0 and m.mtime == 0 for m in members)

    def test_staging_removed(self, temp_dir: Path, dist_dir: Path) -> None:
        ArchivePackager(temp_dir).package(dist_dir, SPEC)

        assert not (temp_dir / SPEC.staging_dir_name).exists()
        assert dist_dir.is_dir()

    def test_reproducible(self, temp_dir: Path, dist_dir: Path) -> None:
        """Test packaging the same tree twice yields identical bytes."""
        packager = ArchivePackager(temp_dir)

        first = packager.package(dist_dir, SPEC).read_bytes()
        second = packager.package(dist_dir, SPEC).read_bytes()

        assert first == second

    def test_leftover_staging_replaced(self, temp_dir: Path, dist_dir: Path) -> None:
        """Test a staging directory from an earlier run does not leak into the archive."""
        leftover = temp_dir / SPEC.staging_dir_name / "old.txt"
        leftover.parent.mkdir()
        leftover.write_text("old")

        archive = ArchivePackager(temp_dir).package(dist_dir, SPEC)

        with tarfile.open(archive, "r:gz") as tar:
            assert f"{SPEC.staging_dir_name}/old.txt" not in tar.getnames()

    def test_failure_cleans_up(self, temp_dir: Path, dist_dir: Path) -> None:
        """Test a compression failure removes the staging directory and partial archive."""
        packager = ArchivePackager(temp_dir)

        def fail(staging: Path, archive: Path, arcname: str) -> None:
            archive.write_bytes(b"partial")
            raise OSError("No space left on device")

        with patch.object(packager, "_compress", side_effect=fail):
            with pytest.raises(ArchiveError, match="Failed to create archive"):
                packager.package(dist_dir, SPEC)

        assert not (temp_dir / SPEC.staging_dir_name).exists()
        assert not (temp_dir / SPEC.output_file_name).exists()

    def test_unremovable_staging_path(self, temp_dir: Path, dist_dir: Path) -> None:
        """Test a staging path that cannot be cleared is reported as an ArchiveError."""
        blocker = temp_dir / SPEC.staging_dir_name
        blocker.write_text("not a directory")

        with pytest.raises(ArchiveError, match="Failed to create archive"):
            ArchivePackager(temp_dir).package(dist_dir, SPEC)

        assert not (temp_dir / SPEC.output_file_name).exists()
