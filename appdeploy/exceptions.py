"""
appdeploy Exception Hierarchy

Every fatal stage failure maps to one class below. The deployer catches
DeployerError, logs it with the class marker and stops the run.
"""

from typing import Optional


class DeployerError(Exception):
    """Base exception for all appdeploy errors."""

    marker = "DEPLOYER"

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message


class InputError(DeployerError):
    """Raised when deployment parameters are missing or invalid."""

    marker = "INPUT"


class SyncError(DeployerError):
    """Raised when cloning or pulling the repository fails."""

    marker = "SYNC"


class ConfigError(DeployerError):
    """Raised when the repository has no usable build descriptor."""

    marker = "CONFIG"


class SettingsError(ConfigError):
    """Raised when the settings file cannot be read or has unknown keys."""

    marker = "SETTINGS"


class ConnectivityError(DeployerError):
    """Raised when the remote host is unreachable or rejects the key."""

    marker = "CONNECTIVITY"


class ProvisionError(DeployerError):
    """Raised when remote packages or services cannot be set up."""

    marker = "PROVISION"


class DeployError(DeployerError):
    """Raised when transfer, build, run or teardown fails."""

    marker = "DEPLOY"


class ProxyConfigError(DeployerError):
    """Raised when the proxy site does not pass `nginx -t`."""

    marker = "PROXY"


class ValidationWarning(DeployerError):
    """
    Post-deploy probe failure.

    Never raised: instances are collected on the check report and logged
    as warnings. The run still succeeds.
    """

    marker = "VALIDATION"
