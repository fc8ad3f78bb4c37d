#!/usr/bin/env python3
"""appdeploy CLI - Main entry point"""

import functools
import os
import sys

from rich.console import Console

# Rich-Click: CLI help with colors
import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.MAX_WIDTH = 100

click.rich_click.STYLE_COMMAND = "bold cyan"
click.rich_click.STYLE_OPTION = "bold magenta"
click.rich_click.STYLE_SWITCH = "bold green"
click.rich_click.STYLE_USAGE = "bold yellow"
click.rich_click.STYLE_HELPTEXT_FIRST_LINE = "bold white"
click.rich_click.STYLE_OPTION_DEFAULT = "dim cyan"
click.rich_click.STYLE_OPTIONS_PANEL_BORDER = "cyan"

from appdeploy.commands.deploy import deploy  # noqa: E402
from appdeploy.config import load_env_file  # noqa: E402
from appdeploy.exceptions import DeployerError  # noqa: E402

console = Console()


def handle_cli_errors(func):
    """Decorator to handle CLI errors gracefully."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DeployerError as e:
            # Raised before a run starts, e.g. a bad settings file
            console.print(f"\n[bold red]✗ \\[{e.marker}][/bold red] {e.message}")
            if e.context:
                console.print(f"  [dim]{e.context}[/dim]")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            sys.exit(130)
        except Exception as e:
            console.print(f"\n[bold red]✗ Unexpected error:[/bold red] {e}\n")

            if os.environ.get("DEBUG"):
                import traceback

                console.print("[dim]Traceback:[/dim]")
                traceback.print_exc()
            sys.exit(1)

    return wrapper


@handle_cli_errors
def main():
    """Main entry point with error handling."""
    load_env_file()
    deploy()


if __name__ == "__main__":
    main()
