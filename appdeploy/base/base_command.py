"""
Base Command Class

Abstract base for appdeploy commands.
Provides logger setup, header display and error handling.
"""

from abc import ABC, abstractmethod
from typing import Optional

from rich.console import Console

from appdeploy.config import DeploySettings
from appdeploy.exceptions import DeployerError
from appdeploy.logger import DeployLogger
from appdeploy.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling with exit codes
    """

    def __init__(self, settings: DeploySettings, verbose: bool = False):
        self.settings = settings
        self.verbose = verbose
        self.console = Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(self, operation: str) -> DeployLogger:
        """
        Initialize the per-run logger.

        Args:
            operation: Operation name (deploy, cleanup)

        Returns:
            DeployLogger instance
        """
        self.logger = DeployLogger(
            self.settings.log_dir, operation, verbose=self.verbose, output=self.console
        )
        return self.logger

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header."""
        show_header(title=title, subtitle=subtitle, details=details, console=self.console)

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗ {message}[/red]")

    def _logs_saved(self) -> None:
        if self.logger:
            self.console.print(f"[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Args:
            **kwargs: Command arguments
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            if self.logger:
                self.logger.log_error("Operation cancelled by user", marker="INTERRUPTED")
            self._logs_saved()
            raise SystemExit(130)
        except SystemExit:
            raise
        except DeployerError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context, marker=e.marker)
            else:
                self.print_error(str(e))
            self._logs_saved()
            raise SystemExit(1)
        except Exception as e:
            error_type = type(e).__name__
            self.console.print(f"\n[bold red]✗ {error_type}:[/bold red] {e}\n")
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}", marker="UNEXPECTED")
            self._logs_saved()
            raise SystemExit(1)
        finally:
            if self.logger:
                self.logger.close()
