"""Rich console utilities for release-publisher.

This module provides a shared Rich Console instance and helper functions
for publish summaries, optimized for GitHub Actions and CI environments.
"""

import os
from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

if TYPE_CHECKING:
    from ._upload.registry import PublishReport

IS_GITHUB_ACTIONS = os.getenv("GITHUB_ACTIONS") == "true"

custom_theme = Theme(
    {
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
    }
)

# Shared console instance
# Force colors ON in GitHub Actions (it supports ANSI colors but Rich may incorrectly disable them)
console = Console(
    theme=custom_theme,
    force_terminal=IS_GITHUB_ACTIONS or None,
    color_system="auto",
)


def gha_warning(message: str, title: Optional[str] = None) -> None:
    """
    Emit a warning that appears in GitHub Actions job summary.

    Args:
        message: Warning message
        title: Optional title for the warning
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::warning title={title}::{message}")
        else:
            print(f"::warning::{message}")
    else:
        if title:
            console.print(f"[warning]Warning ({title}):[/warning] {message}")
        else:
            console.print(f"[warning]Warning:[/warning] {message}")


def gha_error(message: str, title: Optional[str] = None) -> None:
    """
    Emit an error that appears in GitHub Actions job summary.

    Args:
        message: Error message
        title: Optional title for the error
    """
    if IS_GITHUB_ACTIONS:
        if title:
            print(f"::error title={title}::{message}")
        else:
            print(f"::error::{message}")
    else:
        if title:
            console.print(f"[error]Error ({title}):[/error] {message}")
        else:
            console.print(f"[error]Error:[/error] {message}")


def print_upload_summary(report: "PublishReport") -> None:
    """
    Print the outcome of one destination.

    Args:
        report: PublishReport returned by the destination registry
    """
    if report.skipped:
        console.print(f"[warning]- Skipped {report.destination_name}[/warning]")
        console.print(f"  Reason: {report.skipped_reason}")
        return

    table = Table(title=f"Uploads to {report.destination_name}", show_header=True, header_style="bold")
    table.add_column("Target", style="cyan")
    table.add_column("Artifact")
    table.add_column("Status", justify="right")

    for result in report.results:
        if result.success:
            status = "[success]✓ uploaded[/success]"
        else:
            status = f"[error]✗ {result.failure.value if result.failure else 'failed'}[/error]"
        table.add_row(result.target_name, result.artifact_name, status)

    console.print(table)

    for result in report.results:
        if not result.success and result.error_message:
            gha_error(result.error_message, title=f"Upload to {report.destination_name} failed")


def print_final_failure(message: str) -> None:
    """Print final failure message."""
    console.print()
    gha_error(message, title="Publishing Failed")
    if not IS_GITHUB_ACTIONS:
        console.rule("[bold red]FAILED[/bold red]", style="red")
        console.print(f"[bold red]{message}[/bold red]", justify="center")
    console.print()
