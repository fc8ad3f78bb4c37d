"""Tests for request and result models."""

import pytest

from appdeploy.exceptions import InputError
from appdeploy.models.results import (
    DeploymentState,
    EnableOutcome,
    InstallOutcome,
    ProvisionReport,
    RunResult,
    ServiceOutcome,
)

from fakes import TOKEN


class TestDeploymentRequest:
    """Tests for DeploymentRequest."""

    @pytest.mark.parametrize(
        "field", ["repo_url", "token", "branch", "ssh_user", "host", "key_path"]
    )
    def test_empty_field_is_rejected(self, request_factory, field):
        """Every text field is required."""
        request = request_factory(**{field: "  "})

        with pytest.raises(InputError) as exc_info:
            request.validate()

        assert field in exc_info.value.context

    def test_all_empty_fields_are_listed(self, request_factory):
        request = request_factory(repo_url="", host="", app_port=None)

        with pytest.raises(InputError) as exc_info:
            request.validate()

        assert "repo_url" in exc_info.value.context
        assert "host" in exc_info.value.context
        assert "app_port" in exc_info.value.context

    @pytest.mark.parametrize("port", [0, -1, 65536, "abc"])
    def test_invalid_port(self, request_factory, port):
        with pytest.raises(InputError):
            request_factory(app_port=port).validate()

    def test_port_string_is_coerced(self, request_factory):
        request = request_factory(app_port="3000")
        request.validate()
        assert request.app_port == 3000

    def test_missing_key_file(self, request_factory, tmp_path):
        request = request_factory(key_path=str(tmp_path / "nope"))

        with pytest.raises(InputError, match="SSH key not found"):
            request.validate()

    @pytest.mark.parametrize(
        "url,name",
        [
            ("https://github.com/example/webapp.git", "webapp"),
            ("https://github.com/example/webapp", "webapp"),
            ("https://github.com/example/webapp/", "webapp"),
            ("github.com/example/webapp.git", "webapp"),
            ("git@github.com:example/webapp.git", "webapp"),
            ("git@host:webapp.git", "webapp"),
        ],
    )
    def test_repo_name(self, request_factory, url, name):
        assert request_factory(repo_url=url).repo_name == name

    def test_repr_hides_token(self, request_factory):
        request = request_factory()
        assert TOKEN not in repr(request)
        assert "203.0.113.10" in repr(request)

    def test_default_branch(self, key_file):
        from appdeploy.models.request import DeploymentRequest

        request = DeploymentRequest(
            repo_url="https://example.com/a.git",
            token="t",
            ssh_user="u",
            host="h",
            key_path=str(key_file),
            app_port=80,
        )
        assert request.branch == "main"


class TestRunResult:
    """Tests for RunResult and reports."""

    def test_advance_records_history(self):
        result = RunResult()
        result.advance(DeploymentState.START)
        result.advance(DeploymentState.PARAMS_COLLECTED)

        assert result.state == DeploymentState.PARAMS_COLLECTED
        assert result.history == [DeploymentState.START, DeploymentState.PARAMS_COLLECTED]
        assert not result.is_success
        assert result.exit_code == 1

    @pytest.mark.parametrize(
        "state,success",
        [
            (DeploymentState.CHECKED, True),
            (DeploymentState.CLEANED_UP, True),
            (DeploymentState.FAILED, False),
        ],
    )
    def test_terminal_states(self, state, success):
        result = RunResult()
        result.advance(state)
        assert state.is_terminal
        assert result.is_success is success

    def test_provision_report_changed(self):
        report = ProvisionReport(
            packages={"nginx": InstallOutcome.ALREADY_INSTALLED},
            enabled={"nginx": EnableOutcome.ALREADY_ENABLED},
            started={"nginx": ServiceOutcome.ALREADY_RUNNING},
        )
        assert report.changed is False

        report.started["docker"] = ServiceOutcome.STARTED
        assert report.changed is True
