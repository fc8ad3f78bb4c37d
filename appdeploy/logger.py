"""
Logging system for appdeploy
Writes every line to a per-run log file and mirrors it to the console
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

from rich.console import Console
from rich.markup import escape

from appdeploy.constants import LOG_DATETIME_FORMAT, LOG_FILENAME_FORMAT, SECRET_MASK

console = Console()

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


class DeployLogger:
    """
    Manages logging for one deployment run
    - One append-only log file per invocation, named with a timestamp
    - Every logged line is mirrored to stdout
    - Command output goes to the file, and to the console only if verbose
    - Registered secrets are masked everywhere
    """

    def __init__(
        self,
        log_dir: str = ".",
        operation: str = "deploy",
        verbose: bool = False,
        output: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            log_dir: Directory holding the log file
            operation: Operation name written to the header (deploy, cleanup)
            verbose: If True, show command output in console
            output: Console to mirror to (module console by default)
        """
        self.operation = operation
        self.verbose = verbose
        self.console = output or console
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False
        self._secrets: list[str] = []

        logs_dir = Path(log_dir).expanduser()
        logs_dir.mkdir(parents=True, exist_ok=True)
        self.log_path = logs_dir / datetime.now().strftime(LOG_FILENAME_FORMAT)

        # Append, line buffered
        self.log_file = open(self.log_path, "a", buffering=1)

        self._write_log_header()

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
appdeploy Log
{"=" * 80}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self._write(header)

    def register_secret(self, value: Optional[str]) -> None:
        """Mask `value` in everything written from now on."""
        if value and value not in self._secrets:
            self._secrets.append(value)
            # Longest first so overlapping secrets are fully masked
            self._secrets.sort(key=len, reverse=True)

    def mask(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, SECRET_MASK)
        return text

    def _write(self, text: str) -> None:
        if self.log_file:
            self.log_file.write(self.mask(text))
            self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        timestamp = datetime.now().strftime(LOG_DATETIME_FORMAT)
        log_line = self.mask(f"[{timestamp}] [{level}] {message}")

        self._write(log_line + "\n")

        line = escape(log_line)
        if level == "ERROR":
            self.console.print(f"[red]{line}[/red]")
        elif level == "WARNING":
            self.console.print(f"[yellow]{line}[/yellow]")
        elif level == "DEBUG":
            self.console.print(f"[dim]{line}[/dim]")
        else:
            self.console.print(line)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file, shown in console only if verbose.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output:
            return

        clean_output = self.mask(ANSI_ESCAPE.sub("", output))
        for line in clean_output.splitlines():
            self._write(f"  [{stream}] {line}\n")

        if self.verbose:
            self.console.print(escape(clean_output))

    def log_error(
        self, error: str, context: Optional[str] = None, marker: str = "ERROR"
    ):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
            marker: Short error kind written into the block for grepping
        """
        self.has_errors = True

        error_block = f"""
{"!" * 80}
ERROR [{marker}]
{"!" * 80}
{error}
"""
        if context:
            error_block += f"\nContext: {context}\n"

        error_block += f"{'!' * 80}\n\n"

        self._write(error_block)

        self.console.print(f"[bold red]✗ \\[{marker}] {escape(self.mask(error))}[/bold red]")
        if context:
            self.console.print(f"  [color(208)]{escape(self.mask(context))}[/color(208)]")

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

    def success(self, message: str):
        """Log a success message"""
        self.log(f"✓ {message}", "INFO")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(f"⚠ {message}", "WARNING")

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self._write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and exc_type not in (SystemExit, KeyboardInterrupt):
            self.log_error(
                str(exc_val) if exc_val else "Operation failed",
                context=f"{exc_type.__name__}",
            )
        self.close()
        return False
