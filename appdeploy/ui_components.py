"""
appdeploy - UI Components
Standardized headers and run summaries
"""

from typing import Optional

from rich.console import Console

from appdeploy.models.results import RunResult

LOGO = "appdeploy"

# Color scheme
BRAND_COLOR = "color(214)"
SUCCESS_COLOR = "green"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"


def show_header(
    title: str,
    subtitle: Optional[str] = None,
    details: Optional[dict] = None,
    console: Optional[Console] = None,
):
    """
    Display a standardized command header.

    Args:
        title: Main title (e.g., "Deploy", "Cleanup")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)
    """
    if console is None:
        console = Console()

    prefix = f" [bold {BRAND_COLOR}]{LOGO}[/bold {BRAND_COLOR}] [dim]›[/dim]"
    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{value}[/cyan]")

    console.print()


def show_summary(result: RunResult, console: Optional[Console] = None) -> None:
    """Print the terminal state, warnings and log location of a run."""
    if console is None:
        console = Console()

    console.print()
    if result.is_success:
        console.print(f"[{SUCCESS_COLOR}]✓ Finished in state {result.state.value}[/{SUCCESS_COLOR}]")
    else:
        console.print(f"[{ERROR_COLOR}]✗ Failed[/{ERROR_COLOR}]")

    for warning in result.warnings:
        console.print(f"  [{WARNING_COLOR}]⚠[/{WARNING_COLOR}] [dim]{warning.message}[/dim]")

    if result.log_path:
        console.print(f"\n[dim]Logs saved to:[/dim] {result.log_path}\n")
