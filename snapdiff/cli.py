"""CLI entry point for snapshot diffing."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from snapdiff.models.config import DiffConfig
from snapdiff.orchestrator import Orchestrator
from snapdiff.snapshots.scanner import scan_directory

console = Console()

DEFAULT_CONFIG = "snapdiff.json"


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _build_config(config_path: str | None, overrides: dict, pixelmatch_overrides: dict) -> DiffConfig:
    """Load the config file (if any) and apply command-line overrides on top."""
    cfg = DiffConfig.load(config_path) if config_path else DiffConfig()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    data["pixelmatch"].update({k: v for k, v in pixelmatch_overrides.items() if v is not None})
    return DiffConfig(**data)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual snapshot diffing for CI"""
    setup_logging(verbose)


@cli.command()
@click.option("--current", "-c", "current_path", help="Directory with the current snapshots")
@click.option("--base", "-b", "base_path", help="Directory with the base branch snapshots")
@click.option("--merge-base", "-m", "merge_base_path", help="Directory with the merge base snapshots")
@click.option("--output", "-o", "output_path", help="Directory for diff overlays and reports")
@click.option("--threshold", type=float, help="Per-pixel sensitivity, 0 (strict) to 1 (lenient)")
@click.option("--include-aa/--ignore-aa", "include_aa", default=None,
              help="Count anti-aliased pixels as differences")
@click.option("--alpha", type=float, help="Opacity of the unchanged pixels in overlays")
@click.option("--diff-color", help="Highlight color for differing pixels, e.g. '#ff0000'")
@click.option("--jobs", "-j", "max_workers", type=int, help="Maximum parallel comparisons")
@click.option("--config", "config_path", help="Config file path")
@click.option("--fail-on-changes", is_flag=True, help="Exit non-zero when any snapshot changed")
@click.option("--fail-on-errors", is_flag=True, help="Exit non-zero when any comparison failed")
def diff(
    current_path: str | None,
    base_path: str | None,
    merge_base_path: str | None,
    output_path: str | None,
    threshold: float | None,
    include_aa: bool | None,
    alpha: float | None,
    diff_color: str | None,
    max_workers: int | None,
    config_path: str | None,
    fail_on_changes: bool,
    fail_on_errors: bool,
) -> None:
    """Compare current snapshots against base and merge-base snapshots."""
    try:
        cfg = _build_config(
            config_path,
            {
                "current_path": current_path,
                "base_path": base_path,
                "merge_base_path": merge_base_path,
                "output_path": output_path,
                "max_workers": max_workers,
            },
            {
                "threshold": threshold,
                "include_aa": include_aa,
                "alpha": alpha,
                "diff_color": diff_color,
            },
        )
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        console.print("Run 'snapdiff init' to create a default config.")
        sys.exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    try:
        results = Orchestrator(cfg).run()
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    result = results["result"]
    console.print("\n[bold green]Comparison Complete[/bold green]")
    table = Table(title="Snapshot Summary")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Compared", str(result.base_files_length))
    table.add_row("Unchanged", f"[green]{result.unchanged_count}[/green]")
    table.add_row("Changed", f"[red]{len(result.changed_snapshots)}[/red]")
    table.add_row("Added", f"[blue]{len(result.new_snapshots)}[/blue]")
    table.add_row("Missing", f"[yellow]{len(result.missing_snapshots)}[/yellow]")
    table.add_row("Failed", f"[red]{len(result.failed_snapshots)}[/red]")
    table.add_row("Duration", f"{results['duration']}s")
    console.print(table)

    for name, error in sorted(result.failed_snapshots.items()):
        console.print(f"  [red]Indeterminate:[/red] {name} ({error})")

    for fmt, path in results["reports"].items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")

    if result.failed_snapshots and (fail_on_errors or cfg.fail_on_comparison_errors):
        sys.exit(1)
    if result.changed_snapshots and fail_on_changes:
        sys.exit(1)


@cli.command()
@click.argument("directory")
@click.option("--extension", "-e", "extensions", multiple=True, help="Image extension (repeatable)")
def scan(directory: str, extensions: tuple[str, ...]) -> None:
    """List the snapshots found in a directory."""
    snapshots = scan_directory(directory, extensions or (".png",))
    if not snapshots:
        console.print(f"[yellow]No snapshots found in {directory}[/yellow]")
        return
    for name in snapshots.names():
        console.print(f"  {name}")
    console.print(f"[green]{len(snapshots)} snapshots[/green]")


@cli.command()
@click.option("--current", "-c", "current_path", prompt="Current snapshot directory",
              help="Directory with the current snapshots")
@click.option("--config", "config_path", default=DEFAULT_CONFIG, help="Config file path")
def init(current_path: str, config_path: str) -> None:
    """Create a default configuration file."""
    path = Path(config_path)
    if path.exists():
        if not click.confirm(f"{path} already exists. Overwrite?"):
            return

    cfg = DiffConfig(current_path=current_path)
    cfg.save(path)
    console.print(f"[green]Created {path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print(f"  [blue]snapdiff diff --config {path}[/blue]")


if __name__ == "__main__":
    cli()
