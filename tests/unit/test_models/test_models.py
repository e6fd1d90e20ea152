"""Tests for the data models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.layout import DedupGroup, DistributionTree, Placement, PlacementMode
from kyuubi_dist.models.metadata import BuildMetadata


class TestProvidedComponent:
    """Tests for ProvidedComponent."""

    def test_flag_and_profile(self) -> None:
        assert ProvidedComponent.FLINK.flag == "--flink-provided"
        assert ProvidedComponent.HIVE.profile == "-Phive-provided"


class TestBuildConfig:
    """Tests for BuildConfig."""

    def test_requires_orchestrator_path(self) -> None:
        with pytest.raises(ValidationError):
            BuildConfig()  # type: ignore[call-arg]

    def test_hashable(self) -> None:
        """Test equal configurations compare and hash equal."""
        first = BuildConfig(orchestrator_path="mvn", provided=frozenset({ProvidedComponent.SPARK}))
        second = BuildConfig(orchestrator_path="mvn", provided=frozenset({ProvidedComponent.SPARK}))
        assert first == second
        assert hash(first) == hash(second)


class TestBuildMetadata:
    """Tests for BuildMetadata."""

    def test_empty_fields_allowed(self) -> None:
        metadata = BuildMetadata()
        assert metadata.version == ""
        assert metadata.component_version("spark") == ""

    def test_component_version(self) -> None:
        metadata = BuildMetadata(component_versions={"hadoop": "3.3.6"})
        assert metadata.component_version("hadoop") == "3.3.6"


class TestDistributionTree:
    """Tests for DistributionTree."""

    def test_directories_are_unique(self) -> None:
        tree = DistributionTree(root=Path("/dist"))
        tree.add_directory("jars")
        tree.add_directory("jars")
        assert tree.directories == [Path("/dist/jars")]

    def test_steps_keep_order(self) -> None:
        """Test placements and dedup groups are recorded in call order."""
        tree = DistributionTree(root=Path("/dist"))
        copy = Placement(source=Path("/src/jars"), destination=Path("/dist/jars"), mode=PlacementMode.COPY_MATCHING)
        tree.place(copy)
        tree.dedup(Path("/dist/jars"), Path("/dist/beeline-jars"))

        assert tree.steps[0] is copy
        assert tree.steps[1] == DedupGroup(reference=Path("/dist/jars"), dependents=(Path("/dist/beeline-jars"),))
        assert tree.placements == [copy]
        assert len(tree.dedup_groups) == 1

    def test_placement_defaults(self) -> None:
        placement = Placement(source=Path("a"), destination=Path("b"))
        assert placement.mode is PlacementMode.COPY_FILE
        assert placement.required is True
