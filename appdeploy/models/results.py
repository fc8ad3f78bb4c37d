"""
Result Models

Dataclass models for command outputs, stage outcomes and the run result.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from appdeploy.exceptions import DeployerError, ValidationWarning


class DeploymentState(Enum):
    """States of one run. CHECKED, CLEANED_UP and FAILED are terminal."""

    START = "start"
    PARAMS_COLLECTED = "params_collected"
    SYNCED = "synced"
    VALIDATED = "validated"
    CONNECTED = "connected"
    PROVISIONED = "provisioned"
    CLEANED_UP = "cleaned_up"
    DEPLOYED = "deployed"
    PROXY_CONFIGURED = "proxy_configured"
    CHECKED = "checked"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            DeploymentState.CHECKED,
            DeploymentState.CLEANED_UP,
            DeploymentState.FAILED,
        )


class DescriptorKind(Enum):
    """Kind of build descriptor found in the repository."""

    DOCKERFILE = "dockerfile"
    COMPOSE = "compose"


@dataclass(frozen=True)
class BuildDescriptor:
    """Build descriptor selected for the deploy stage."""

    kind: DescriptorKind
    filename: str

    @property
    def is_compose(self) -> bool:
        return self.kind == DescriptorKind.COMPOSE


class RemovalOutcome(Enum):
    REMOVED = "removed"
    ALREADY_ABSENT = "already_absent"


class ServiceOutcome(Enum):
    STARTED = "started"
    ALREADY_RUNNING = "already_running"


class EnableOutcome(Enum):
    ENABLED = "enabled"
    ALREADY_ENABLED = "already_enabled"


class InstallOutcome(Enum):
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"


@dataclass
class ExecutionResult:
    """Result of a local command execution (git, rsync)."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    command: str = ""

    @property
    def is_success(self) -> bool:
        """Check if execution succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if execution failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"ExecutionResult(returncode={self.returncode}, command='{self.command[:50]}...')"


@dataclass
class SSHResult:
    """Result of an SSH command execution."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if SSH command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if SSH command failed."""
        return self.returncode != 0

    @property
    def output(self) -> str:
        """Get combined output (stdout + stderr)."""
        return f"{self.stdout}\n{self.stderr}".strip()

    def __repr__(self) -> str:
        return f"SSHResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass
class ProvisionReport:
    """Per package and per service outcomes of the provisioning stage."""

    packages: dict[str, InstallOutcome] = field(default_factory=dict)
    enabled: dict[str, EnableOutcome] = field(default_factory=dict)
    started: dict[str, ServiceOutcome] = field(default_factory=dict)

    @property
    def changed(self) -> bool:
        """True when at least one mutating remote command ran."""
        return (
            any(o == InstallOutcome.INSTALLED for o in self.packages.values())
            or any(o == EnableOutcome.ENABLED for o in self.enabled.values())
            or any(o == ServiceOutcome.STARTED for o in self.started.values())
        )


@dataclass
class DeployReport:
    """Outcome of the transfer and (re)deploy stage."""

    descriptor: BuildDescriptor
    previous: RemovalOutcome


@dataclass
class ProxyReport:
    site_path: str
    enabled_path: str
    replaced_existing: bool = False
    default_site: RemovalOutcome = RemovalOutcome.ALREADY_ABSENT
    reloaded: bool = False


@dataclass
class TeardownReport:
    """Outcome of every removal performed by the cleanup path."""

    compose_stack: RemovalOutcome = RemovalOutcome.ALREADY_ABSENT
    container: RemovalOutcome = RemovalOutcome.ALREADY_ABSENT
    remote_dir: RemovalOutcome = RemovalOutcome.ALREADY_ABSENT
    proxy_site: RemovalOutcome = RemovalOutcome.ALREADY_ABSENT
    images_pruned: bool = False
    proxy_reloaded: bool = False

    @property
    def removed_anything(self) -> bool:
        return RemovalOutcome.REMOVED in (
            self.compose_stack,
            self.container,
            self.remote_dir,
            self.proxy_site,
        )


@dataclass
class CheckReport:
    """Post-deploy validation. Failed probes only produce warnings."""

    service_status: str = ""
    containers: str = ""
    probe_ok: bool = False
    probe_output: str = ""
    warnings: list["ValidationWarning"] = field(default_factory=list)


@dataclass
class RunResult:
    """Final result of Deployer.run."""

    state: DeploymentState = DeploymentState.START
    history: list[DeploymentState] = field(default_factory=list)
    descriptor: Optional[BuildDescriptor] = None
    error: Optional["DeployerError"] = None
    warnings: list["ValidationWarning"] = field(default_factory=list)
    log_path: Optional[Path] = None
    provision: Optional[ProvisionReport] = None
    teardown: Optional[TeardownReport] = None
    deploy: Optional[DeployReport] = None
    proxy: Optional[ProxyReport] = None
    check: Optional[CheckReport] = None

    def advance(self, state: DeploymentState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def is_success(self) -> bool:
        return self.state in (DeploymentState.CHECKED, DeploymentState.CLEANED_UP)

    @property
    def exit_code(self) -> int:
        return 0 if self.is_success else 1

    def __repr__(self) -> str:
        return f"RunResult(state={self.state.value}, warnings={len(self.warnings)})"
