"""Remote provisioning: container runtime, compose tool and reverse proxy."""

from appdeploy.constants import INSTALLED_STATUS
from appdeploy.exceptions import ProvisionError
from appdeploy.models.results import (
    EnableOutcome,
    InstallOutcome,
    ProvisionReport,
    ServiceOutcome,
)
from appdeploy.services.remote import RemoteService


class Provisioner(RemoteService):
    """
    Ensures packages are installed and services enabled and running.

    Every item is probed first, so a second run against a provisioned host
    performs no mutating command at all.
    """

    error_class = ProvisionError

    def provision(self) -> ProvisionReport:
        report = ProvisionReport()

        missing = []
        for package in self.settings.packages:
            if self.is_installed(package):
                report.packages[package] = InstallOutcome.ALREADY_INSTALLED
            else:
                missing.append(package)

        if missing:
            self.logger.log(f"Installing {', '.join(missing)}")
            self.run_checked("sudo apt-get update -y", "Package index update failed")
            self.run_checked(
                f"sudo DEBIAN_FRONTEND=noninteractive apt-get install -y {' '.join(missing)}",
                f"Installing {', '.join(missing)} failed",
            )
            for package in missing:
                report.packages[package] = InstallOutcome.INSTALLED
        else:
            self.logger.log("All required packages already installed")

        for service in self.settings.services:
            report.enabled[service] = self.ensure_enabled(service)
            report.started[service] = self.ensure_running(service)

        return report

    def is_installed(self, package: str) -> bool:
        # Removed packages keep a dpkg record ("deinstall ok config-files")
        result = self.run(f"dpkg-query -W -f='${{Status}}' {package}")
        return result.is_success and result.stdout.strip() == INSTALLED_STATUS

    def ensure_enabled(self, service: str) -> EnableOutcome:
        result = self.run(f"systemctl is-enabled {service}")
        if result.is_success and result.stdout.strip() == "enabled":
            return EnableOutcome.ALREADY_ENABLED

        self.run_checked(f"sudo systemctl enable {service}", f"Could not enable {service}")
        return EnableOutcome.ENABLED

    def ensure_running(self, service: str) -> ServiceOutcome:
        result = self.run(f"systemctl is-active {service}")
        if result.is_success and result.stdout.strip() == "active":
            return ServiceOutcome.ALREADY_RUNNING

        self.run_checked(f"sudo systemctl start {service}", f"Could not start {service}")
        return ServiceOutcome.STARTED
