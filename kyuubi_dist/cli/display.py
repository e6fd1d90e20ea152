"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kyuubi_dist.models.config import BuildConfig, ProvidedComponent
from kyuubi_dist.models.metadata import BuildMetadata

console = Console()


def show_error(title: str, message: str) -> None:
    """Display an error message."""
    console.print()
    console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{title}[/]",
            border_style="green",
        )
    )


def show_usage(usage: str) -> None:
    console.print(escape(usage), highlight=False)


def show_config_summary(config: BuildConfig) -> None:
    """Display the resolved build configuration before building.

    Args:
        config: Resolved configuration.
    """
    console.print()
    table = Table(title="[bold]Build Configuration[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Maven", escape(config.orchestrator_path))
    table.add_row("Archive", "yes" if config.make_archive else "no")
    table.add_row("Web UI", "yes" if config.enable_web_ui else "no")
    provided = [c.value for c in ProvidedComponent if config.is_provided(c)]
    table.add_row("Provided", ", ".join(provided) or "none")
    if config.custom_name is not None:
        table.add_row("Name", escape(config.custom_name))
    table.add_row("Maven args", escape(" ".join(config.passthrough_args)) or "-")

    console.print(Panel(table, border_style="yellow"))


def show_metadata(metadata: BuildMetadata) -> None:
    """Display the resolved build metadata.

    Args:
        metadata: Resolved metadata; empty values are flagged.
    """
    table = Table(title="[bold]Build Metadata[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    def _value(value: str) -> str:
        return escape(value) if value else "[yellow]<unresolved>[/]"

    table.add_row("Version", _value(metadata.version))
    table.add_row("Java", _value(metadata.java_version))
    table.add_row("Scala", _value(metadata.scala_version))
    for name, version in metadata.component_versions.items():
        table.add_row(name.capitalize(), _value(version))
    if metadata.git_revision:
        table.add_row("Git revision", metadata.git_revision)

    console.print(Panel(table, border_style="blue"))


def show_result(result: dict) -> None:
    """Display the outcome of a pipeline run.

    Args:
        result: Dictionary from PipelineResult.to_dict().
    """
    console.print()
    table = Table(title="[bold]Distribution[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Status", "[bold green]SUCCESS[/]")
    table.add_row("Version", escape(result.get("version") or "N/A"))
    table.add_row("Directory", escape(result.get("dist_dir", "N/A")))
    table.add_row("Placed", str(result.get("placed", 0)))
    table.add_row("Skipped", str(result.get("skipped", 0)))
    table.add_row("Links", str(result.get("linked", 0)))
    if result.get("archive"):
        table.add_row("Archive", escape(result["archive"]))

    console.print(Panel(table, border_style="green"))
