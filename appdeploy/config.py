"""
Settings loading.

Fixed resource names and remote layout live in DeploySettings so every
stage reads them from the context instead of module globals.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import dotenv_values

from appdeploy.constants import (
    DEFAULT_COMPOSE_COMMAND,
    DEFAULT_CONTAINER_NAME,
    DEFAULT_LOG_DIR,
    DEFAULT_REMOTE_DIR,
    DEFAULT_WORKDIR,
    ENV_PREFIX,
    NGINX_DEFAULT_SITE,
    NGINX_SITES_AVAILABLE,
    NGINX_SITES_ENABLED,
    PROBE_TIMEOUT,
    PROBE_URL,
    REQUIRED_PACKAGES,
    REQUIRED_SERVICES,
    RSYNC_EXCLUDE,
    SETTINGS_FILENAME,
    SSH_CONNECTION_TIMEOUT,
    USER_SETTINGS_PATH,
)
from appdeploy.exceptions import SettingsError


@dataclass
class DeploySettings:
    """Tunable, non-secret settings of a deployment."""

    container_name: str = DEFAULT_CONTAINER_NAME
    remote_dir: str = DEFAULT_REMOTE_DIR
    sites_available: str = NGINX_SITES_AVAILABLE
    sites_enabled: str = NGINX_SITES_ENABLED
    default_site: str = NGINX_DEFAULT_SITE
    compose_command: str = DEFAULT_COMPOSE_COMMAND
    packages: list[str] = field(default_factory=lambda: list(REQUIRED_PACKAGES))
    services: list[str] = field(default_factory=lambda: list(REQUIRED_SERVICES))
    connect_timeout: int = SSH_CONNECTION_TIMEOUT
    command_timeout: Optional[int] = None
    probe_url: str = PROBE_URL
    probe_timeout: int = PROBE_TIMEOUT
    rsync_exclude: list[str] = field(default_factory=lambda: list(RSYNC_EXCLUDE))
    log_dir: str = DEFAULT_LOG_DIR
    workdir: str = DEFAULT_WORKDIR

    @property
    def image_name(self) -> str:
        """Container and image share one identifier."""
        return self.container_name

    @property
    def site_name(self) -> str:
        return f"{self.container_name}.conf"

    @property
    def site_path(self) -> str:
        return f"{self.sites_available.rstrip('/')}/{self.site_name}"

    @property
    def enabled_site_path(self) -> str:
        return f"{self.sites_enabled.rstrip('/')}/{self.site_name}"

    @property
    def default_site_path(self) -> str:
        """Enabled catch-all site to disable; empty `default_site` keeps it."""
        if not self.default_site:
            return ""
        return f"{self.sites_enabled.rstrip('/')}/{self.default_site}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploySettings":
        """
        Build settings from a parsed YAML mapping.

        Raises:
            SettingsError: On unknown keys or a non-mapping document
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise SettingsError("Settings file must contain a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise SettingsError(
                f"Unknown settings: {', '.join(unknown)}",
                context=f"Allowed: {', '.join(sorted(known))}",
            )
        return cls(**data)


def find_settings_file() -> Optional[Path]:
    """Look for a settings file in the working directory, then the home dir."""
    search_paths = [
        Path.cwd() / SETTINGS_FILENAME,
        Path(USER_SETTINGS_PATH).expanduser(),
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def load_settings(path: Optional[Path] = None) -> DeploySettings:
    """
    Load settings from YAML, falling back to defaults when no file exists.

    Args:
        path: Explicit settings file (must exist)

    Returns:
        DeploySettings instance
    """
    if path is None:
        path = find_settings_file()
        if path is None:
            return DeploySettings()
    else:
        path = Path(path).expanduser()
        if not path.exists():
            raise SettingsError(f"Settings file not found: {path}")

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SettingsError(f"Invalid YAML in {path}", context=str(e))

    return DeploySettings.from_dict(data)


def load_env_file(path: Optional[Path] = None) -> Dict[str, str]:
    """
    Export APPDEPLOY_* values from a .env file into the environment.

    Values already present in the environment win. Returns the keys that
    were exported.
    """
    env_file = Path(path) if path else Path.cwd() / ".env"
    if not env_file.exists():
        return {}

    exported = {}
    for key, value in dotenv_values(env_file).items():
        if not key.startswith(f"{ENV_PREFIX}_") or value is None:
            continue
        if key in os.environ:
            continue
        os.environ[key] = value
        exported[key] = value
    return exported
