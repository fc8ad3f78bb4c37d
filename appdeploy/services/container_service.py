"""Application transfer, container (re)deployment and teardown."""

from pathlib import Path
from typing import Optional

from appdeploy.constants import COMPOSE_FILENAMES
from appdeploy.exceptions import DeployError
from appdeploy.models.results import (
    BuildDescriptor,
    DeployReport,
    RemovalOutcome,
    TeardownReport,
)
from appdeploy.services.proxy_service import ProxyService
from appdeploy.services.remote import RemoteService


class ContainerService(RemoteService):
    """Runs the app on the remote host under the fixed container name."""

    error_class = DeployError

    @property
    def remote_dir(self) -> str:
        return self.settings.remote_dir

    def compose(self, filename: str, args: str) -> str:
        return f"cd {self.remote_dir} && sudo {self.settings.compose_command} -f {filename} {args}"

    # Deploy

    def deploy(self, repo_dir: Path, descriptor: BuildDescriptor) -> DeployReport:
        """
        Transfer the working tree and start the new container or stack.

        Raises:
            DeployError: On transfer, build or run failure
        """
        self.transfer(repo_dir)

        if descriptor.is_compose:
            previous = self.compose_down(descriptor.filename)
            self.logger.log(f"Starting compose stack from {descriptor.filename}")
            self.run_checked(
                self.compose(descriptor.filename, "up -d --build"),
                "Compose stack failed to start",
            )
        else:
            previous = self.remove_container()
            name = self.settings.container_name
            image = self.settings.image_name
            port = self.context.app_port
            self.logger.log(f"Building image {image}")
            self.run_checked(f"sudo docker build -t {image} {self.remote_dir}", "Image build failed")
            self.logger.log(f"Starting container {name} on port {port}")
            self.run_checked(
                f"sudo docker run -d --name {name} -p {port}:{port} {image}",
                "Container failed to start",
            )

        return DeployReport(descriptor=descriptor, previous=previous)

    def transfer(self, repo_dir: Path) -> None:
        self.run_checked(f"mkdir -p {self.remote_dir}", "Could not create remote app directory")

        self.logger.log(f"Syncing {repo_dir} to {self.context.host}:{self.remote_dir}")
        try:
            result = self.ssh.sync_directory(
                repo_dir, self.context.host, self.remote_dir, self.settings.rsync_exclude
            )
        except FileNotFoundError:
            raise DeployError("rsync executable not found", context="Install rsync and retry")

        self.logger.log_command(result.command)
        self.logger.log_output(result.stdout, "stdout")
        self.logger.log_output(result.stderr, "stderr")
        if result.is_failure:
            raise DeployError(
                "File transfer failed",
                context=f"rsync exited {result.returncode}: {result.stderr.strip()}",
            )

    def container_exists(self) -> bool:
        name = self.settings.container_name
        result = self.run(f"sudo docker ps -a --filter name=^/{name}$ --format '{{{{.Names}}}}'")
        return name in result.stdout.split()

    def remove_container(self) -> RemovalOutcome:
        """Stop and remove the fixed-name container if there is one."""
        if not self.container_exists():
            return RemovalOutcome.ALREADY_ABSENT

        name = self.settings.container_name
        self.logger.log(f"Removing previous container {name}")
        self.run_checked(f"sudo docker rm -f {name}", f"Could not remove container {name}")
        return RemovalOutcome.REMOVED

    def compose_down(self, filename: str) -> RemovalOutcome:
        """Bring down the previous stack if any of its containers exist."""
        result = self.run(self.compose(filename, "ps -q"))
        if result.is_failure or not result.stdout.strip():
            return RemovalOutcome.ALREADY_ABSENT

        self.logger.log("Bringing down previous compose stack")
        self.run_checked(self.compose(filename, "down"), "Could not stop previous compose stack")
        return RemovalOutcome.REMOVED

    # Teardown

    def remote_compose_file(self) -> Optional[str]:
        for filename in COMPOSE_FILENAMES:
            if self.run(f"test -f {self.remote_dir}/{filename}").is_success:
                return filename
        return None

    def teardown(self, proxy: ProxyService) -> TeardownReport:
        """
        Remove everything a previous deployment left behind.

        Missing resources are reported as ALREADY_ABSENT, not errors.

        Raises:
            DeployError: If a removal or the proxy reload fails
        """
        report = TeardownReport()

        compose_file = self.remote_compose_file()
        if compose_file:
            report.compose_stack = self.compose_down(compose_file)

        report.container = self.remove_container()

        self.run_checked("sudo docker image prune -f", "Could not prune dangling images")
        report.images_pruned = True

        if self.path_exists(self.remote_dir):
            self.run_checked(f"rm -rf {self.remote_dir}", "Could not remove remote app directory")
            report.remote_dir = RemovalOutcome.REMOVED

        report.proxy_site = proxy.remove_site()
        proxy.reload()
        report.proxy_reloaded = True

        return report
