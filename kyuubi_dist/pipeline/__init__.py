"""Distribution assembly pipeline.

This module provides:
- Command-line resolution into a BuildConfig
- Metadata queries and build invocations against Maven
- Distribution layout planning and assembly
- Jar deduplication and archive packaging
"""

from kyuubi_dist.pipeline.archive import ArchivePackager, archive_suffix, compute_archive_spec
from kyuubi_dist.pipeline.build_driver import BuildDriver, BuildOutcome, profile_flags, swap_abi
from kyuubi_dist.pipeline.config_resolver import USAGE, resolve_config
from kyuubi_dist.pipeline.dedup import DedupLinker
from kyuubi_dist.pipeline.environment import build_environment, resolve_java_home
from kyuubi_dist.pipeline.layout import AssemblyReport, LayoutAssembler, LayoutPlanner
from kyuubi_dist.pipeline.metadata import MetadataResolver
from kyuubi_dist.pipeline.orchestrator import InvocationResult, MavenOrchestrator, filter_query_output
from kyuubi_dist.pipeline.runner import DistributionPipeline, PipelineResult

__all__ = [
    "USAGE",
    "resolve_config",
    "build_environment",
    "resolve_java_home",
    "MavenOrchestrator",
    "InvocationResult",
    "filter_query_output",
    "MetadataResolver",
    "BuildDriver",
    "BuildOutcome",
    "profile_flags",
    "swap_abi",
    "LayoutPlanner",
    "LayoutAssembler",
    "AssemblyReport",
    "DedupLinker",
    "ArchivePackager",
    "archive_suffix",
    "compute_archive_spec",
    "DistributionPipeline",
    "PipelineResult",
]
