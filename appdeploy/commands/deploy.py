"""Deploy command - clone, provision, deploy and proxy an app on a remote host"""

from pathlib import Path
from typing import Optional

import rich_click as click

from appdeploy.base import BaseCommand
from appdeploy.config import DeploySettings, load_settings
from appdeploy.constants import DEFAULT_BRANCH
from appdeploy.core import Deployer
from appdeploy.exceptions import InputError
from appdeploy.models.request import DeploymentRequest
from appdeploy.models.results import RunResult
from appdeploy.ui_components import show_summary
from appdeploy.utils import missing_tools


class DeployCommand(BaseCommand):
    """Run the deployment (or cleanup) procedure for one request."""

    def __init__(
        self,
        request: DeploymentRequest,
        settings: DeploySettings,
        cleanup: bool = False,
        verbose: bool = False,
    ):
        super().__init__(settings, verbose=verbose)
        self.request = request
        self.cleanup = cleanup
        self.result: Optional[RunResult] = None

    def execute(self) -> None:
        """Execute deploy command."""
        operation = "cleanup" if self.cleanup else "deploy"
        self.show_header(
            title="Cleanup" if self.cleanup else "Deploy",
            subtitle="Remove the previous deployment" if self.cleanup else None,
            details={
                "Target": f"{self.request.ssh_user}@{self.request.host}",
                "Repository": self.request.repo_name or "-",
                "Port": self.request.app_port,
            },
        )

        logger = self.init_logger(operation)
        logger.register_secret(self.request.token)

        missing = missing_tools()
        if missing:
            raise InputError(
                f"Missing local tools: {', '.join(missing)}",
                context="Install them and retry",
            )

        deployer = Deployer(self.settings, logger)
        self.result = deployer.run(self.request, cleanup_only=self.cleanup)

        show_summary(self.result, console=self.console)
        if not self.result.is_success:
            raise SystemExit(self.result.exit_code)


@click.command(name="appdeploy")
@click.option(
    "--repo-url",
    envvar="APPDEPLOY_REPO_URL",
    prompt="Enter Git repository URL",
    help="HTTPS URL of the application repository",
)
@click.option(
    "--token",
    envvar="APPDEPLOY_TOKEN",
    prompt="Enter your Personal Access Token (PAT)",
    hide_input=True,
    help="Access token used for cloning (never logged)",
)
@click.option(
    "--branch",
    envvar="APPDEPLOY_BRANCH",
    default=DEFAULT_BRANCH,
    show_default=True,
    prompt="Enter branch name",
    help="Branch to deploy",
)
@click.option(
    "--ssh-user",
    envvar="APPDEPLOY_SSH_USER",
    prompt="Enter remote server username",
    help="Remote SSH user",
)
@click.option(
    "--host",
    envvar="APPDEPLOY_HOST",
    prompt="Enter remote server IP address",
    help="Remote host address",
)
@click.option(
    "--key-path",
    envvar="APPDEPLOY_KEY_PATH",
    prompt="Enter SSH key path (e.g., ~/.ssh/id_rsa)",
    help="Private key used for SSH",
)
@click.option(
    "--app-port",
    envvar="APPDEPLOY_APP_PORT",
    type=int,
    prompt="Enter app internal container port (e.g., 3000)",
    help="Port the app listens on (published host:container)",
)
@click.option("--cleanup", is_flag=True, help="Remove the previous deployment and stop")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file (default: ./appdeploy.yml, ~/.appdeploy/config.yml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show command output")
@click.version_option(version="1.0.0")
def deploy(
    repo_url,
    token,
    branch,
    ssh_user,
    host,
    key_path,
    app_port,
    cleanup,
    config_path,
    verbose,
):
    """
    Deploy a Dockerized app from a git repository to a remote host

    This command will:
    1. Clone (or pull) the repository
    2. Check for a Dockerfile or compose file
    3. Install Docker, docker-compose and Nginx on the host
    4. Sync the files and (re)start the container or stack
    5. Point an Nginx site on port 80 at the app port
    6. Probe the result

    Missing parameters are prompted for.

    \b
    Examples:
        appdeploy
        appdeploy --host 203.0.113.10 --app-port 3000
        appdeploy --cleanup
    """
    settings = load_settings(config_path)
    request = DeploymentRequest(
        repo_url=repo_url,
        token=token,
        branch=branch or DEFAULT_BRANCH,
        ssh_user=ssh_user,
        host=host,
        key_path=key_path,
        app_port=app_port,
    )
    cmd = DeployCommand(request, settings, cleanup=cleanup, verbose=verbose)
    cmd.run()
