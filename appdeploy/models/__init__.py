"""
appdeploy Domain Models

Dataclass-based models for requests, SSH settings and results.
"""

from .results import (
    BuildDescriptor,
    CheckReport,
    DeploymentState,
    DeployReport,
    DescriptorKind,
    EnableOutcome,
    ExecutionResult,
    InstallOutcome,
    ProvisionReport,
    ProxyReport,
    RemovalOutcome,
    RunResult,
    ServiceOutcome,
    SSHResult,
    TeardownReport,
)
from .ssh import SSHConfig
from .request import DeploymentContext, DeploymentRequest

__all__ = [
    # Results
    "BuildDescriptor",
    "CheckReport",
    "DeploymentState",
    "DeployReport",
    "DescriptorKind",
    "EnableOutcome",
    "ExecutionResult",
    "InstallOutcome",
    "ProvisionReport",
    "ProxyReport",
    "RemovalOutcome",
    "RunResult",
    "ServiceOutcome",
    "SSHResult",
    "TeardownReport",
    # SSH
    "SSHConfig",
    # Request
    "DeploymentContext",
    "DeploymentRequest",
]
