"""Shared helper functions for the projroot CLI."""

import logging

from rich.console import Console
from rich.logging import RichHandler

from projroot.exceptions import (
    ConfigError,
    HistoryError,
    InvalidDetectionMethodError,
    ProjRootError,
    SubmissionError,
)

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Send projroot log records to stderr through rich."""
    logger = logging.getLogger("projroot")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=err_console, show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def handle_projroot_error(error: ProjRootError) -> None:
    """Handle projroot errors with user-friendly messages.

    Args:
        error: The projroot error to handle.
    """
    if isinstance(error, ConfigError):
        err_console.print(f"[red]Error: Invalid configuration in {error.path}[/red]")
        err_console.print(f"[red]{error.message}[/red]")
    elif isinstance(error, InvalidDetectionMethodError):
        err_console.print(f"[red]Error: Invalid detection method '{error.method}'[/red]")
        err_console.print(
            f"[yellow]Valid methods: {', '.join(sorted(error.valid_methods))}[/yellow]",
        )
    elif isinstance(error, HistoryError):
        err_console.print(f"[red]Error: Failed to {error.operation} project history[/red]")
        err_console.print(f"[red]{error.path}: {error.message}[/red]")
    elif isinstance(error, SubmissionError):
        err_console.print(f"[red]Error: Could not start resolution for {error.start_dir}[/red]")
        err_console.print(f"[yellow]The worker pool refused the job: {error.message}[/yellow]")
    else:
        err_console.print(f"[red]Error: {error}[/red]")
