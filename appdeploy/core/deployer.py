"""
Deployer

Runs the deployment stages in order against one DeploymentRequest. The
first DeployerError stops the run: it is logged once with its marker and
the result ends in FAILED. Nothing is retried.

    deploy:  START > PARAMS_COLLECTED > SYNCED > VALIDATED > CONNECTED
             > PROVISIONED > DEPLOYED > PROXY_CONFIGURED > CHECKED
    cleanup: START > PARAMS_COLLECTED > CONNECTED > PROVISIONED > CLEANED_UP
"""

from pathlib import Path
from typing import Optional

from appdeploy.config import DeploySettings
from appdeploy.exceptions import ConnectivityError, DeployerError
from appdeploy.logger import DeployLogger
from appdeploy.models.request import DeploymentContext, DeploymentRequest
from appdeploy.models.results import (
    BuildDescriptor,
    CheckReport,
    DeploymentState,
    DeployReport,
    ProvisionReport,
    ProxyReport,
    RunResult,
    TeardownReport,
)
from appdeploy.services.container_service import ContainerService
from appdeploy.services.descriptor import detect_descriptor
from appdeploy.services.git_service import GitService
from appdeploy.services.health import HealthChecker
from appdeploy.services.provisioner import Provisioner
from appdeploy.services.proxy_service import ProxyService
from appdeploy.services.ssh_service import SSHService


class Deployer:
    """Executes the deployment procedure for one request."""

    def __init__(
        self,
        settings: DeploySettings,
        logger: DeployLogger,
        ssh_service: Optional[SSHService] = None,
        git_service: Optional[GitService] = None,
    ):
        self.settings = settings
        self.logger = logger
        self.ssh = ssh_service
        self.git = git_service or GitService(logger)
        self.context: Optional[DeploymentContext] = None
        self.result = RunResult()

    def run(self, request: DeploymentRequest, cleanup_only: bool = False) -> RunResult:
        """
        Execute every stage, or the cleanup path when `cleanup_only`.

        Returns:
            RunResult whose state is CHECKED, CLEANED_UP or FAILED
        """
        self.result = RunResult(log_path=self.logger.log_path)
        self.result.advance(DeploymentState.START)

        try:
            self.collect(request)

            if not cleanup_only:
                self.sync_repository()
                self.detect_descriptor()

            self.check_connectivity()
            self.provision()

            if cleanup_only:
                self.teardown()
                self.logger.success("Cleanup complete")
                return self.result

            self.deploy()
            self.configure_proxy()
            self.validate_deployment()
            self.logger.success(f"Deployment complete! Check your app via http://{request.host}")

        except DeployerError as e:
            self.logger.log_error(e.message, context=e.context, marker=e.marker)
            self.result.error = e
            self.result.advance(DeploymentState.FAILED)

        return self.result

    # Stages

    def collect(self, request: DeploymentRequest) -> None:
        """Validate the request; no network access happens before this passes."""
        self.logger.register_secret(request.token)
        if request.key_path:
            self.logger.register_secret(request.key_path)
            self.logger.register_secret(str(request.ssh_config.key_path_expanded))
        self.logger.step("Validating deployment parameters")
        request.validate()

        self.context = DeploymentContext(
            request=request, settings=self.settings, logger=self.logger
        )
        if self.ssh is None:
            self.ssh = SSHService(request.ssh_config)

        self.logger.success(f"Parameters collected: {request!r}")
        self.result.advance(DeploymentState.PARAMS_COLLECTED)

    def sync_repository(self) -> Path:
        self.logger.step("Syncing repository")
        repo_dir = self.git.clone_or_pull(self.context.request, self.context.workdir)
        self.context.repo_dir = repo_dir
        self.logger.success(f"Working copy ready at {repo_dir}")
        self.result.advance(DeploymentState.SYNCED)
        return repo_dir

    def detect_descriptor(self) -> BuildDescriptor:
        self.logger.step("Detecting build descriptor")
        descriptor = detect_descriptor(self.context.repo_dir)
        self.context.descriptor = descriptor
        self.result.descriptor = descriptor
        self.logger.success(f"{descriptor.filename} found")
        self.result.advance(DeploymentState.VALIDATED)
        return descriptor

    def check_connectivity(self) -> None:
        request = self.context.request
        target = f"{request.ssh_user}@{request.host}"
        self.logger.step(f"Testing SSH connectivity to {target}")

        try:
            result = self.ssh.check_connectivity(request.host, self.settings.connect_timeout)
        except (TimeoutError, OSError) as e:
            raise ConnectivityError(f"SSH connection to {target} failed", context=str(e))

        if result.is_failure:
            raise ConnectivityError(
                f"SSH connection to {target} failed",
                context=result.output or f"ssh exited {result.returncode}",
            )
        self.logger.success("Connected")
        self.result.advance(DeploymentState.CONNECTED)

    def provision(self) -> ProvisionReport:
        self.logger.step("Preparing remote environment")
        report = Provisioner(self.context, self.ssh).provision()
        self.result.provision = report
        self.logger.success(
            "Remote environment ready" if report.changed else "Remote environment already provisioned"
        )
        self.result.advance(DeploymentState.PROVISIONED)
        return report

    def teardown(self) -> TeardownReport:
        self.logger.step("Removing previous deployment")
        proxy = ProxyService(self.context, self.ssh)
        report = ContainerService(self.context, self.ssh).teardown(proxy)
        self.result.teardown = report
        if not report.removed_anything:
            self.logger.log("Nothing to remove: no previous deployment found")
        self.result.advance(DeploymentState.CLEANED_UP)
        return report

    def deploy(self) -> DeployReport:
        self.logger.step("Deploying application")
        report = ContainerService(self.context, self.ssh).deploy(
            self.context.repo_dir, self.context.descriptor
        )
        self.result.deploy = report
        self.logger.success("Application started")
        self.result.advance(DeploymentState.DEPLOYED)
        return report

    def configure_proxy(self) -> ProxyReport:
        self.logger.step("Configuring Nginx reverse proxy")
        report = ProxyService(self.context, self.ssh).configure(self.context.app_port)
        self.result.proxy = report
        self.logger.success(f"Port 80 forwards to localhost:{self.context.app_port}")
        self.result.advance(DeploymentState.PROXY_CONFIGURED)
        return report

    def validate_deployment(self) -> CheckReport:
        self.logger.step("Validating deployment")
        report = HealthChecker(self.context, self.ssh).check()
        self.result.check = report
        self.result.warnings.extend(report.warnings)
        self.result.advance(DeploymentState.CHECKED)
        return report
