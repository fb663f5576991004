"""Main CLI entry point for the projroot tool."""

import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.table import Table
from rich import box

from projroot.cli_helpers import configure_logging, console, handle_projroot_error
from projroot.config import Options, load_options
from projroot.core import RootMatch, start_dir_for
from projroot.exceptions import ProjRootError
from projroot.history import ProjectHistory
from projroot.patterns import ListingCache, describe, evaluate
from projroot.worker import Completion, CompletionQueue, RootResolver

app = typer.Typer(
    name="projroot",
    help="projroot - Find the project root of a file by matching ancestor directories",
    add_completion=False,
)

CONFIG_HELP = "Config file (default: $PROJROOT_CONFIG or ~/.config/projroot/config.yaml)"


def _load_options_or_exit(config: Optional[Path]) -> Options:
    try:
        return load_options(config)
    except ProjRootError as e:
        handle_projroot_error(e)
        raise typer.Exit(code=1)


def _resolve_in_background(start_dir: Path, patterns: List[str]) -> Optional[RootMatch]:
    """Resolve on the worker pool and wait for the completion on this thread."""
    completions = CompletionQueue()
    results: List[Completion] = []
    with RootResolver(max_workers=1, dispatch=completions) as resolver:
        resolver.submit(start_dir, patterns, results.append)
        while not results:
            completions.drain(timeout=0.1)
    return results[0].match


@app.command("find")
def find_root(
    path: Optional[Path] = typer.Argument(
        None, help="File or directory to start from (default: current directory)"
    ),
    pattern: Optional[List[str]] = typer.Option(
        None,
        "--pattern",
        "-p",
        help="Pattern to test, in priority order (repeatable, overrides config)",
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Print only the root path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Find the project root for a file or directory."""
    configure_logging(verbose)
    options = _load_options_or_exit(config)
    patterns = list(pattern) if pattern else options.patterns
    start_dir = start_dir_for(path if path is not None else Path.cwd())

    try:
        match = _resolve_in_background(start_dir, patterns)
    except ProjRootError as e:
        handle_projroot_error(e)
        raise typer.Exit(code=1)

    if match is None:
        if not quiet:
            console.print(f"[yellow]No project root found for {start_dir}[/yellow]")
        raise typer.Exit(code=1)

    if quiet:
        console.print(str(match.directory), highlight=False, soft_wrap=True)
    else:
        console.print(f"[green]✓ Project root: {match.directory}[/green]")
        console.print(f"  matched by [cyan]{match.pattern}[/cyan] ({describe(match.pattern)})")


@app.command("check")
def check_pattern(
    pattern: str = typer.Argument(..., help="Pattern to evaluate"),
    directory: Optional[Path] = typer.Argument(
        None, help="Directory to test (default: current directory)"
    ),
) -> None:
    """Check whether a single pattern matches a directory."""
    target = Path(os.path.abspath(directory if directory is not None else Path.cwd()))
    if evaluate(pattern, target, ListingCache()):
        console.print(f"[green]✓ {pattern} matches {target}[/green]")
    else:
        console.print(f"[yellow]✗ {pattern} does not match {target}[/yellow]")
        raise typer.Exit(code=1)


@app.command("patterns")
def show_patterns(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Show the configured patterns in priority order."""
    options = _load_options_or_exit(config)

    if not options.patterns:
        console.print("[yellow]No patterns configured[/yellow]")
        return

    table = Table(title="Root patterns", box=box.SIMPLE)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Pattern", style="green")
    table.add_column("Meaning")
    for idx, pat in enumerate(options.patterns, start=1):
        table.add_row(str(idx), pat, describe(pat))
    console.print(table)


history_app = typer.Typer(name="history", help="Manage recently used project roots")
app.add_typer(history_app, name="history")


def _read_history(config: Optional[Path]) -> ProjectHistory:
    options = _load_options_or_exit(config)
    history = ProjectHistory(options.datapath)
    try:
        history.read_projects_from_history()
    except ProjRootError as e:
        handle_projroot_error(e)
        raise typer.Exit(code=1)
    return history


@history_app.command("list")
def list_history(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """List recent project roots, most recent first."""
    history = _read_history(config)
    projects = list(reversed(history.get_recent_projects()))

    if not projects:
        console.print("[yellow]No projects in history[/yellow]")
        return

    table = Table(title="Recent projects", box=box.SIMPLE)
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Project", style="green")
    for idx, project in enumerate(projects, start=1):
        table.add_row(str(idx), project)
    console.print(table)


@history_app.command("add")
def add_history(
    directory: Path = typer.Argument(..., help="Project root to remember"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Remember a project root."""
    history = _read_history(config)
    target = Path(os.path.abspath(directory))
    if not target.is_dir():
        console.print(f"[red]Error: {target} is not a directory[/red]")
        raise typer.Abort()
    history.add_session_project(target)
    try:
        history.write_projects_to_history()
    except ProjRootError as e:
        handle_projroot_error(e)
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Added {target}[/green]")


@history_app.command("forget")
def forget_history(
    directory: Path = typer.Argument(..., help="Project root to forget"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=CONFIG_HELP),
) -> None:
    """Remove a project root from the history."""
    history = _read_history(config)
    target = str(Path(os.path.abspath(directory)))
    if target not in history.get_recent_projects():
        console.print(f"[yellow]Not in the history: {target}[/yellow]")
        raise typer.Exit(code=1)
    history.delete_project(target)
    try:
        history.write_projects_to_history()
    except ProjRootError as e:
        handle_projroot_error(e)
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Forgot {target}[/green]")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
