"""vsbootstrap CLI - Build an analysis module tree from a Visual Studio solution."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from vsbootstrap.config import BootstrapConfig, Settings
from vsbootstrap.errors import VisualStudioError
from vsbootstrap.output import BootstrapResult, write_output
from vsbootstrap.pipeline import run_pipeline


@click.group()
def cli() -> None:
    """vsbootstrap - Discover the projects of a Visual Studio solution."""
    pass


def _configure_logging(verbose: bool, quiet: bool) -> None:
    from rich.logging import RichHandler

    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
        force=True,
    )


def _run_with_progress(config: BootstrapConfig) -> BootstrapResult:
    """Run the pipeline with Rich progress display."""
    from rich.console import Console
    from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
    from rich.table import Table

    console = Console()

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Initialising...", total=None)

        def on_phase(name, label):
            progress.update(task, description=label)

        result = run_pipeline(config, progress_callback=on_phase)

    stats = result.stats
    table = Table(title=f"Visual Studio Solution: {Path(config.base_dir).name}", show_edge=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Modules", str(stats.get("modules", 0)))
    table.add_row("Test modules", str(stats.get("test_modules", 0)))
    table.add_row("Source files", str(stats.get("source_files", 0)))
    table.add_row("Test files", str(stats.get("test_files", 0)))
    table.add_row("Assemblies", str(stats.get("assemblies", 0)))
    table.add_row("Duration", f"{result.metadata.get('duration_ms', 0):.1f}ms")

    console.print(table)

    if config.verbose and result.modules:
        module_table = Table(title="Modules", show_edge=False)
        module_table.add_column("Key", style="bold")
        module_table.add_column("Kind")
        module_table.add_column("Assembly")
        for module in result.modules:
            kind = "test" if module["test_dirs"] else "main"
            assembly = module["properties"].get("sonar.cs.fxcop.assembly", "-")
            module_table.add_row(module["key"], kind, assembly)
        console.print(module_table)

    return result


@cli.command("scan")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option("-o", "--output", "output_path", default=None, help="Output JSON file path")
@click.option("-D", "--define", "defines", multiple=True, help="Setting as key=value (repeatable)")
@click.option("--key", "project_key", default=None, help="Root project key")
@click.option("--verbose", is_flag=True, help="Show debug logs and the module table")
@click.option("--quiet", is_flag=True, help="Suppress all output except errors")
def scan_cmd(
    path: str,
    output_path: str | None,
    defines: tuple[str, ...],
    project_key: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Read the solution under PATH and write its module tree as JSON."""
    base_dir = Path(path).resolve()
    _configure_logging(verbose, quiet)

    try:
        properties = Settings.from_pairs(defines).properties
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--define") from e

    config = BootstrapConfig(
        base_dir=str(base_dir),
        project_key=project_key or base_dir.name,
        project_name=base_dir.name,
        output_path=output_path or f"{base_dir.name}.vsbootstrap.json",
        properties=properties,
        verbose=verbose,
        quiet=quiet,
    )

    try:
        if config.quiet:
            result = run_pipeline(config)
        else:
            result = _run_with_progress(config)
    except VisualStudioError as e:
        from rich.console import Console
        Console(stderr=True).print(f"[red]Error:[/red] {e}")
        raise SystemExit(1) from e

    write_output(result, config.output_path)

    if not config.quiet:
        from rich.console import Console
        Console().print(f"[green]Output written to:[/green] {config.output_path}")


if __name__ == "__main__":
    cli()
