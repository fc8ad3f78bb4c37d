"""Shared plumbing for services that drive the remote host."""

from typing import Optional, Type

from appdeploy.exceptions import DeployerError
from appdeploy.models.request import DeploymentContext
from appdeploy.models.results import SSHResult
from appdeploy.services.ssh_service import SSHService


class RemoteService:
    """
    Base for the provisioner, container, proxy and health services.

    Every remote command is logged, its output written to the log file,
    and failures turned into the caller's error kind.
    """

    error_class: Type[DeployerError] = DeployerError

    def __init__(self, context: DeploymentContext, ssh: SSHService):
        self.context = context
        self.settings = context.settings
        self.logger = context.logger
        self.ssh = ssh

    def run(self, command: str, input_text: Optional[str] = None) -> SSHResult:
        """Run a remote command and log it; never raises on non-zero exit."""
        self.logger.log_command(command)
        try:
            result = self.ssh.execute_command(
                self.context.host,
                command,
                timeout=self.settings.command_timeout,
                input_text=input_text,
            )
        except (TimeoutError, OSError) as e:
            raise self.error_class(f"Remote command could not run: {command}", context=str(e))

        if result.stdout:
            self.logger.log_output(result.stdout, "stdout")
        if result.stderr:
            self.logger.log_output(result.stderr, "stderr")
        return result

    def run_checked(
        self,
        command: str,
        message: str,
        input_text: Optional[str] = None,
        error_class: Optional[Type[DeployerError]] = None,
    ) -> SSHResult:
        """Run a remote command; raise error_class(message) on failure."""
        result = self.run(command, input_text=input_text)
        if result.is_failure:
            raise (error_class or self.error_class)(
                message,
                context=f"`{command}` exited {result.returncode}: {result.output or 'no output'}",
            )
        return result

    def path_exists(self, path: str) -> bool:
        # -L catches dangling symlinks in sites-enabled
        return self.run(f"test -e {path} -o -L {path}").is_success
