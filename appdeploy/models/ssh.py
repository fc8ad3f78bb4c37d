"""
SSH Configuration Models

Dataclass models for SSH operations.
"""

from dataclasses import dataclass, field
from pathlib import Path

from appdeploy.constants import SECRET_MASK, SSH_OPTIONS


@dataclass
class SSHConfig:
    """SSH configuration for connecting to the remote host."""

    key_path: str
    user: str
    options: list[str] = field(default_factory=lambda: list(SSH_OPTIONS))

    @property
    def key_path_expanded(self) -> Path:
        """Get expanded key path (resolves ~)."""
        return Path(self.key_path).expanduser()

    @property
    def key_exists(self) -> bool:
        """Check if private key file exists."""
        return self.key_path_expanded.exists()

    def destination(self, host: str) -> str:
        """Get SSH destination string (user@host)."""
        return f"{self.user}@{host}"

    def ssh_prefix(self, redact: bool = False) -> list[str]:
        """Get `ssh -i KEY <options>` without a destination."""
        key = SECRET_MASK if redact else str(self.key_path_expanded)
        return ["ssh", "-i", key, *self.options]

    def rsync_shell(self, redact: bool = False) -> str:
        """Get the remote shell string handed to `rsync -e`."""
        return " ".join(self.ssh_prefix(redact=redact))

    def __repr__(self) -> str:
        return f"SSHConfig(user={self.user})"
