"""
appdeploy Services Layer

One service per concern the deployer drives.
"""

from .ssh_service import SSHService
from .git_service import GitService
from .descriptor import detect_descriptor
from .provisioner import Provisioner
from .container_service import ContainerService
from .proxy_service import ProxyService, render_site
from .health import HealthChecker

__all__ = [
    "SSHService",
    "GitService",
    "detect_descriptor",
    "Provisioner",
    "ContainerService",
    "ProxyService",
    "render_site",
    "HealthChecker",
]
