"""Tests for the appdeploy command line."""

import pytest
from click.testing import CliRunner

from appdeploy.commands import deploy as deploy_module
from appdeploy.commands.deploy import deploy
from appdeploy.exceptions import SettingsError
from appdeploy.main import handle_cli_errors
from appdeploy.models.results import DeploymentState, RunResult

from fakes import TOKEN

ENV_VARS = [
    "APPDEPLOY_REPO_URL",
    "APPDEPLOY_TOKEN",
    "APPDEPLOY_BRANCH",
    "APPDEPLOY_SSH_USER",
    "APPDEPLOY_HOST",
    "APPDEPLOY_KEY_PATH",
    "APPDEPLOY_APP_PORT",
]


class RecordingDeployer:
    """Stands in for Deployer and returns a canned state."""

    runs = []
    state = DeploymentState.CHECKED

    def __init__(self, settings, logger):
        self.logger = logger

    def run(self, request, cleanup_only=False):
        RecordingDeployer.runs.append((request, cleanup_only))
        result = RunResult(log_path=self.logger.log_path)
        result.advance(DeploymentState.START)
        result.advance(RecordingDeployer.state)
        return result


@pytest.fixture
def cli(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / "appdeploy.yml").write_text("log_dir: logs\nworkdir: work\n")

    RecordingDeployer.runs = []
    RecordingDeployer.state = DeploymentState.CHECKED
    monkeypatch.setattr(deploy_module, "Deployer", RecordingDeployer)
    monkeypatch.setattr(deploy_module, "missing_tools", lambda: [])
    return CliRunner()


def full_args(key_file, *extra):
    return [
        "--repo-url",
        "https://github.com/example/webapp.git",
        "--token",
        TOKEN,
        "--branch",
        "main",
        "--ssh-user",
        "deploy",
        "--host",
        "203.0.113.10",
        "--key-path",
        str(key_file),
        "--app-port",
        "8080",
        *extra,
    ]


def test_deploy_success(cli, key_file):
    result = cli.invoke(deploy, full_args(key_file))

    assert result.exit_code == 0, result.output
    request, cleanup_only = RecordingDeployer.runs[0]
    assert request.host == "203.0.113.10"
    assert request.app_port == 8080
    assert cleanup_only is False
    assert TOKEN not in result.output


def test_cleanup_flag(cli, key_file):
    RecordingDeployer.state = DeploymentState.CLEANED_UP

    result = cli.invoke(deploy, full_args(key_file, "--cleanup"))

    assert result.exit_code == 0, result.output
    assert RecordingDeployer.runs[0][1] is True
    assert "Cleanup" in result.output


def test_failed_run_exits_1(cli, key_file):
    RecordingDeployer.state = DeploymentState.FAILED

    result = cli.invoke(deploy, full_args(key_file))

    assert result.exit_code == 1


def test_missing_parameters_are_prompted(cli, key_file):
    answers = "\n".join(
        [
            "https://github.com/example/webapp.git",
            TOKEN,
            "",
            "deploy",
            "203.0.113.10",
            str(key_file),
            "3000",
        ]
    )

    result = cli.invoke(deploy, [], input=answers + "\n")

    assert result.exit_code == 0, result.output
    request, _ = RecordingDeployer.runs[0]
    assert request.branch == "main"
    assert request.app_port == 3000
    assert "Enter remote server IP address" in result.output
    assert TOKEN not in result.output


def test_parameters_from_environment(cli, key_file, monkeypatch):
    monkeypatch.setenv("APPDEPLOY_REPO_URL", "https://github.com/example/webapp.git")
    monkeypatch.setenv("APPDEPLOY_TOKEN", TOKEN)
    monkeypatch.setenv("APPDEPLOY_BRANCH", "release")
    monkeypatch.setenv("APPDEPLOY_SSH_USER", "deploy")
    monkeypatch.setenv("APPDEPLOY_HOST", "203.0.113.10")
    monkeypatch.setenv("APPDEPLOY_KEY_PATH", str(key_file))
    monkeypatch.setenv("APPDEPLOY_APP_PORT", "8080")

    result = cli.invoke(deploy, [])

    assert result.exit_code == 0, result.output
    assert RecordingDeployer.runs[0][0].branch == "release"


def test_non_numeric_port_is_rejected(cli, key_file):
    args = full_args(key_file)
    args[args.index("8080")] = "http"

    result = cli.invoke(deploy, args)

    assert result.exit_code == 2
    assert RecordingDeployer.runs == []


def test_missing_local_tools(cli, key_file, monkeypatch):
    monkeypatch.setattr(deploy_module, "missing_tools", lambda: ["rsync"])

    result = cli.invoke(deploy, full_args(key_file))

    assert result.exit_code == 1
    assert "rsync" in result.output
    assert RecordingDeployer.runs == []


def test_handle_cli_errors():
    @handle_cli_errors
    def broken():
        raise SettingsError("Invalid YAML in appdeploy.yml")

    with pytest.raises(SystemExit) as exc_info:
        broken()

    assert exc_info.value.code == 1


def test_handle_cli_errors_interrupt():
    @handle_cli_errors
    def interrupted():
        raise KeyboardInterrupt

    with pytest.raises(SystemExit) as exc_info:
        interrupted()

    assert exc_info.value.code == 130
