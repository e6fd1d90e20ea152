"""Data models module."""

from kyuubi_dist.models.archive import ArchiveSpec
from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.layout import DedupGroup, DistributionTree, Placement, PlacementMode
from kyuubi_dist.models.metadata import BuildMetadata

__all__ = [
    "ArchiveSpec",
    "BuildConfig",
    "ProvidedComponent",
    "BuildMetadata",
    "DistributionTree",
    "Placement",
    "PlacementMode",
    "DedupGroup",
]
