"""
Deployment Request Models

The request is the only input of a run. The context carries the request,
the settings and the logger through every stage.
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from appdeploy.constants import DEFAULT_BRANCH
from appdeploy.exceptions import InputError
from appdeploy.models.results import BuildDescriptor
from appdeploy.models.ssh import SSHConfig

if TYPE_CHECKING:
    from appdeploy.config import DeploySettings
    from appdeploy.logger import DeployLogger


@dataclass
class DeploymentRequest:
    """Parameters of a single deployment. Never persisted."""

    repo_url: str
    token: str
    ssh_user: str
    host: str
    key_path: str
    app_port: int
    branch: str = DEFAULT_BRANCH

    @property
    def repo_name(self) -> str:
        """Local directory name derived from the repository URL."""
        name = self.repo_url.strip().rstrip("/").rsplit("/", 1)[-1]
        # scp-style URLs without a path separator: git@host:repo.git
        name = name.rsplit(":", 1)[-1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return name

    @property
    def ssh_config(self) -> SSHConfig:
        return SSHConfig(key_path=self.key_path, user=self.ssh_user)

    def validate(self) -> None:
        """
        Check every field locally.

        Raises:
            InputError: if a field is empty, the port is out of range,
                or the key file does not exist
        """
        missing = []
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(f.name)
        if missing:
            raise InputError(
                "Missing one or more required inputs",
                context=f"Empty fields: {', '.join(missing)}",
            )

        try:
            port = int(self.app_port)
        except (TypeError, ValueError):
            raise InputError(f"Application port must be an integer, got '{self.app_port}'")
        if isinstance(self.app_port, bool) or not 1 <= port <= 65535:
            raise InputError(f"Application port out of range: {self.app_port}")
        self.app_port = port

        if not self.repo_name:
            raise InputError(f"Cannot derive repository name from '{self.repo_url}'")

        if not self.ssh_config.key_exists:
            raise InputError(
                "SSH key not found",
                context="No file exists at the given key path",
            )

    def __repr__(self) -> str:
        return (
            f"DeploymentRequest(repo={self.repo_url}, branch={self.branch}, "
            f"target={self.ssh_user}@{self.host}, port={self.app_port})"
        )


@dataclass
class DeploymentContext:
    """Everything a stage needs, passed explicitly instead of globals."""

    request: DeploymentRequest
    settings: "DeploySettings"
    logger: "DeployLogger"
    repo_dir: Optional[Path] = None
    descriptor: Optional[BuildDescriptor] = None

    @property
    def workdir(self) -> Path:
        return Path(self.settings.workdir).expanduser()

    @property
    def host(self) -> str:
        return self.request.host

    @property
    def app_port(self) -> int:
        return int(self.request.app_port)
