"""Nginx reverse proxy configuration."""

from typing import Optional

from jinja2 import Template

from appdeploy.constants import PROXY_LISTEN_PORT
from appdeploy.exceptions import DeployError, ProxyConfigError
from appdeploy.models.results import ProxyReport, RemovalOutcome
from appdeploy.services.remote import RemoteService

SITE_TEMPLATE = Template(
    """\
server {
    listen {{ listen_port }};
    server_name _;

    location / {
        proxy_pass http://localhost:{{ app_port }};
        proxy_set_header Host $host;
        proxy_set_header X-Real-IP $remote_addr;
        proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
    }
}
"""
)


def render_site(app_port: int, listen_port: int = PROXY_LISTEN_PORT) -> str:
    """Render the site descriptor forwarding every path to the app port."""
    return SITE_TEMPLATE.render(app_port=int(app_port), listen_port=listen_port)


class ProxyService(RemoteService):
    """Writes, enables, validates and reloads the proxy site."""

    error_class = ProxyConfigError

    @property
    def backup_path(self) -> str:
        return f"{self.settings.site_path}.bak"

    def configure(self, app_port: int) -> ProxyReport:
        """
        Install the site and reload nginx.

        `nginx -t` runs before the reload. If it fails, the previous site
        file is put back (or the new one removed) and nginx keeps serving
        its current configuration. Once the new site validates, the
        package's catch-all `default` site is disabled so requests to the
        host address reach the app.

        Raises:
            ProxyConfigError: If the configuration does not validate
        """
        site = self.settings.site_path
        enabled = self.settings.enabled_site_path
        report = ProxyReport(site_path=site, enabled_path=enabled)

        report.replaced_existing = self.path_exists(site)
        was_enabled = self.path_exists(enabled)
        if report.replaced_existing:
            self.run_checked(f"sudo cp -p {site} {self.backup_path}", "Could not back up proxy site")

        self.run_checked(
            f"sudo tee {site} > /dev/null",
            "Could not write proxy site",
            input_text=render_site(app_port),
        )
        self.run_checked(f"sudo ln -sf {site} {enabled}", "Could not enable proxy site")

        test = self.run("sudo nginx -t")
        if test.is_failure:
            context = test.output or f"nginx -t exited {test.returncode}"
            restore_error = self._restore(report.replaced_existing, was_enabled)
            if restore_error:
                context += f"\nRestore failed: {restore_error}"
            raise ProxyConfigError(
                "Proxy configuration failed syntax validation; nginx not reloaded",
                context=context,
            )

        if report.replaced_existing:
            self.run(f"sudo rm -f {self.backup_path}")

        report.default_site = self.disable_default_site()

        self.run_checked("sudo systemctl reload nginx", "nginx reload failed")
        report.reloaded = True
        return report

    def disable_default_site(self) -> RemovalOutcome:
        default = self.settings.default_site_path
        if not default or default == self.settings.enabled_site_path:
            return RemovalOutcome.ALREADY_ABSENT
        if not self.path_exists(default):
            return RemovalOutcome.ALREADY_ABSENT

        self.logger.log(f"Disabling catch-all site {default}")
        self.run_checked(f"sudo rm -f {default}", "Could not disable the default nginx site")
        return RemovalOutcome.REMOVED

    def _restore(self, had_site: bool, was_enabled: bool) -> Optional[str]:
        """Undo the rejected site; returns a description of what could not be undone."""
        site = self.settings.site_path
        commands = []
        if had_site:
            self.logger.warning("Restoring previous proxy site")
            commands.append(f"sudo mv -f {self.backup_path} {site}")
        else:
            self.logger.warning("Removing rejected proxy site")

        stale = []
        if not was_enabled:
            stale.append(self.settings.enabled_site_path)
        if not had_site:
            stale.append(site)
        if stale:
            commands.append(f"sudo rm -f {' '.join(stale)}")

        failures = []
        for command in commands:
            result = self.run(command)
            if result.is_failure:
                failures.append(f"`{command}` exited {result.returncode}: {result.output or 'no output'}")

        if failures:
            self.logger.warning("Could not restore the previous proxy site")
        return "; ".join(failures) or None

    def remove_site(self) -> RemovalOutcome:
        """Remove the site file and its symlink; absence is not an error."""
        site = self.settings.site_path
        enabled = self.settings.enabled_site_path
        if not (self.path_exists(site) or self.path_exists(enabled)):
            return RemovalOutcome.ALREADY_ABSENT

        self.run_checked(
            f"sudo rm -f {enabled} {site}", "Could not remove proxy site", error_class=DeployError
        )
        return RemovalOutcome.REMOVED

    def reload(self) -> None:
        self.run_checked("sudo systemctl reload nginx", "nginx reload failed", error_class=DeployError)
