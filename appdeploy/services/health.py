"""Post-deploy validation."""

from typing import Optional

from appdeploy.exceptions import ValidationWarning
from appdeploy.models.results import CheckReport, SSHResult
from appdeploy.services.remote import RemoteService


class HealthChecker(RemoteService):
    """Reports runtime status and probes the proxy; never fails the run."""

    error_class = ValidationWarning

    def run(self, command: str, input_text: Optional[str] = None) -> SSHResult:
        # A hung or missing ssh must not turn a probe into a fatal error
        try:
            return super().run(command, input_text=input_text)
        except ValidationWarning as e:
            return SSHResult(returncode=255, stderr=e.context or "", host=self.context.host, command=command)

    def check(self) -> CheckReport:
        report = CheckReport()

        status = self.run("sudo systemctl status docker --no-pager")
        report.service_status = status.stdout
        if status.is_failure:
            self._warn(report, "Docker service is not reported active", status.output)

        containers = self.run("sudo docker ps")
        report.containers = containers.stdout
        if containers.is_failure:
            self._warn(report, "Could not list running containers", containers.output)

        url = self.settings.probe_url
        probe = self.run(f"curl -fsS -I --max-time {self.settings.probe_timeout} {url}")
        report.probe_output = probe.output
        report.probe_ok = probe.is_success
        if probe.is_success:
            first_line = probe.stdout.strip().splitlines()[0] if probe.stdout.strip() else ""
            self.logger.success(f"Probe {url}: {first_line or 'responded'}")
        else:
            self._warn(report, f"App may not be responding yet ({url})", probe.output)

        return report

    def _warn(self, report: CheckReport, message: str, detail: str) -> None:
        warning = ValidationWarning(message, context=detail or None)
        report.warnings.append(warning)
        self.logger.warning(message)
