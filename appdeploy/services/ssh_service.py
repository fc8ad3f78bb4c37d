"""SSH service for executing commands on the remote host."""

import subprocess
import time
from pathlib import Path
from typing import Optional

from appdeploy.models.results import ExecutionResult, SSHResult
from appdeploy.models.ssh import SSHConfig


class SSHService:
    """Service for SSH operations."""

    def __init__(self, config: SSHConfig):
        """
        Initialize SSH service.

        Args:
            config: SSH configuration
        """
        self.config = config

    def _ssh_command(self, host: str, command: str, extra_options=()) -> list[str]:
        return [
            *self.config.ssh_prefix(),
            *extra_options,
            self.config.destination(host),
            command,
        ]

    def execute_command(
        self,
        host: str,
        command: str,
        timeout: Optional[int] = None,
        input_text: Optional[str] = None,
    ) -> SSHResult:
        """
        Execute command on remote host via SSH.

        Blocks until the command finishes; there is no timeout unless one
        is given.

        Args:
            host: Host IP or hostname
            command: Command to execute
            timeout: Command timeout in seconds
            input_text: Text fed to the remote command's stdin

        Returns:
            SSHResult with execution details
        """
        return self._run(host, command, self._ssh_command(host, command), timeout, input_text)

    def check_connectivity(self, host: str, timeout: int) -> SSHResult:
        """
        Non-interactive authentication probe.

        BatchMode makes ssh fail instead of prompting for a password or
        passphrase.

        Args:
            host: Host IP or hostname
            timeout: ConnectTimeout in seconds

        Returns:
            SSHResult of `echo connected`
        """
        command = "echo connected"
        ssh_cmd = self._ssh_command(
            host,
            command,
            extra_options=("-o", "BatchMode=yes", "-o", f"ConnectTimeout={timeout}"),
        )
        # ConnectTimeout only bounds the TCP connect, not the auth exchange
        return self._run(host, command, ssh_cmd, timeout * 3, None)

    def _run(
        self,
        host: str,
        command: str,
        ssh_cmd: list[str],
        timeout: Optional[int],
        input_text: Optional[str],
    ) -> SSHResult:
        start_time = time.time()

        try:
            result = subprocess.run(
                ssh_cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                input=input_text,
            )
        except subprocess.TimeoutExpired:
            raise TimeoutError(
                f"SSH command timed out after {timeout}s\nContext: Host: {host}, Command: {command}"
            )

        return SSHResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            host=host,
            command=command,
            duration_seconds=time.time() - start_time,
        )

    def sync_directory(
        self,
        local_dir: Path,
        host: str,
        remote_dir: str,
        exclude: Optional[list[str]] = None,
    ) -> ExecutionResult:
        """
        Mirror a local directory into a remote one with rsync.

        Args:
            local_dir: Source directory (its contents are copied)
            host: Host IP or hostname
            remote_dir: Destination directory on the host
            exclude: rsync exclude patterns

        Returns:
            ExecutionResult of the rsync run
        """
        args = []
        for pattern in exclude or []:
            args.extend(["--exclude", pattern])
        args.extend(
            [
                f"{str(local_dir).rstrip('/')}/",
                f"{self.config.destination(host)}:{remote_dir.rstrip('/')}/",
            ]
        )
        rsync_cmd = ["rsync", "-az", "--delete", "-e", self.config.rsync_shell(), *args]
        # The key path stays out of the command recorded for logs
        shown = ["rsync", "-az", "--delete", "-e", self.config.rsync_shell(redact=True), *args]

        result = subprocess.run(rsync_cmd, capture_output=True, text=True)
        return ExecutionResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=" ".join(shown),
        )
