"""Main CLI entry point for kyuubi-dist."""

import click

from kyuubi_dist.cli.display import (
    show_config_summary,
    show_error,
    show_metadata,
    show_result,
    show_success,
    show_usage,
)
from kyuubi_dist.core.config.settings import get_settings
from kyuubi_dist.core.exceptions.errors import ConfigurationError, DistError, HelpRequested, UsageError
from kyuubi_dist.core.logger.logger import setup_logging
from kyuubi_dist.pipeline.config_resolver import USAGE, resolve_config
from kyuubi_dist.pipeline.runner import DistributionPipeline, default_orchestrator_path

# Flags and Maven arguments are parsed by resolve_config, not by click
CONTEXT_SETTINGS = {
    "ignore_unknown_options": True,
    "allow_extra_args": True,
    "help_option_names": [],
}


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("tokens", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def main(ctx: click.Context, tokens: tuple[str, ...]) -> None:
    """Build a Kyuubi binary distribution.

    Example:
        kyuubi-dist --tgz --web-ui -Pspark-3.5
    """
    try:
        settings = get_settings()
        setup_logging(settings.logging)
    except ConfigurationError as e:
        show_error("Configuration Error", str(e))
        ctx.exit(e.exit_code)

    try:
        config = resolve_config(tokens, default_orchestrator_path(settings))
    except HelpRequested:
        show_usage(USAGE)
        ctx.exit(0)
    except UsageError as e:
        show_error("Usage Error", e.message)
        show_usage(USAGE)
        ctx.exit(1)

    show_config_summary(config)

    try:
        result = DistributionPipeline(settings).run(config)
    except DistError as e:
        show_error(type(e).__name__, str(e))
        ctx.exit(e.exit_code)

    show_metadata(result.metadata)
    show_result(result.to_dict())
    if result.archive_path is not None:
        show_success("Archive", f"{result.archive_path.name} is generated in {result.archive_path.parent}")
