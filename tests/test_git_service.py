"""Tests for repository sync."""

import shutil
import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from appdeploy.exceptions import SyncError
from appdeploy.services import git_service
from appdeploy.services.git_service import GitService, credential_url, public_url

from fakes import TOKEN


class TestCredentialUrl:
    """Tests for credential_url and public_url."""

    def test_https(self):
        assert (
            credential_url("https://github.com/example/webapp.git", "tok")
            == "https://tok@github.com/example/webapp.git"
        )

    def test_scheme_less_is_https(self):
        assert (
            credential_url("github.com/example/webapp.git", "tok")
            == "https://tok@github.com/example/webapp.git"
        )

    def test_existing_userinfo_replaced(self):
        assert (
            credential_url("https://olduser@github.com/example/webapp.git", "tok")
            == "https://tok@github.com/example/webapp.git"
        )

    @pytest.mark.parametrize(
        "url",
        [
            "git@github.com:example/webapp.git",
            "ssh://git@github.com/example/webapp.git",
            "file:///srv/git/webapp.git",
            "/srv/git/webapp.git",
        ],
    )
    def test_other_transports_unchanged(self, url):
        assert credential_url(url, "tok") == url

    def test_public_url_strips_userinfo(self):
        assert public_url("https://tok@github.com/example/webapp.git") == "https://github.com/example/webapp.git"


class FakeRun:
    """Records git invocations and answers from a script."""

    def __init__(self, failures=None):
        self.calls = []
        self.failures = failures or {}

    def __call__(self, argv, cwd=None, env=None, capture_output=True, text=True):
        self.calls.append(SimpleNamespace(argv=argv, cwd=cwd, env=env))
        subcommand = argv[1]
        if subcommand in self.failures:
            return SimpleNamespace(returncode=1, stdout="", stderr=self.failures[subcommand])
        if subcommand == "clone":
            Path(argv[-1], ".git").mkdir(parents=True, exist_ok=True)
        return SimpleNamespace(returncode=0, stdout="", stderr="")


@pytest.fixture
def fake_run(monkeypatch):
    run = FakeRun()
    monkeypatch.setattr(git_service.subprocess, "run", run)
    return run


class TestGitService:
    """Tests for GitService with a scripted git."""

    def test_fresh_clone(self, fake_run, request_factory, logger, tmp_path):
        repo_dir = GitService(logger).clone_or_pull(request_factory(), tmp_path)

        assert repo_dir == tmp_path / "webapp"
        clone, set_url = fake_run.calls
        assert clone.argv == [
            "git",
            "clone",
            "--branch",
            "main",
            f"https://{TOKEN}@github.com/example/webapp.git",
            str(tmp_path / "webapp"),
        ]
        assert clone.env["GIT_TERMINAL_PROMPT"] == "0"
        assert set_url.argv == [
            "git",
            "remote",
            "set-url",
            "origin",
            "https://github.com/example/webapp.git",
        ]

    def test_token_never_logged(self, fake_run, request_factory, logger, tmp_path):
        GitService(logger).clone_or_pull(request_factory(), tmp_path)

        assert TOKEN not in logger.log_path.read_text()

    def test_existing_copy_is_pulled(self, fake_run, request_factory, logger, tmp_path):
        (tmp_path / "webapp" / ".git").mkdir(parents=True)

        GitService(logger).clone_or_pull(request_factory(branch="release"), tmp_path)

        checkout, pull = fake_run.calls
        assert checkout.argv == ["git", "checkout", "release"]
        assert checkout.cwd == tmp_path / "webapp"
        assert pull.argv[:3] == ["git", "pull", "--ff-only"]
        assert pull.argv[-1] == "release"

    def test_pull_conflict_raises_sync_error(self, monkeypatch, request_factory, logger, tmp_path):
        run = FakeRun(failures={"pull": f"fatal: Not possible to fast-forward, https://{TOKEN}@github.com"})
        monkeypatch.setattr(git_service.subprocess, "run", run)
        (tmp_path / "webapp" / ".git").mkdir(parents=True)

        with pytest.raises(SyncError, match="Git pull failed") as exc_info:
            GitService(logger).clone_or_pull(request_factory(), tmp_path)

        assert TOKEN not in str(exc_info.value)
        assert "fast-forward" in exc_info.value.context

    def test_clone_failure(self, monkeypatch, request_factory, logger, tmp_path):
        run = FakeRun(failures={"clone": "fatal: Authentication failed"})
        monkeypatch.setattr(git_service.subprocess, "run", run)

        with pytest.raises(SyncError, match="Git clone failed"):
            GitService(logger).clone_or_pull(request_factory(), tmp_path)

    def test_non_repository_directory_in_the_way(self, fake_run, request_factory, logger, tmp_path):
        (tmp_path / "webapp").mkdir()
        (tmp_path / "webapp" / "notes.txt").write_text("x")

        with pytest.raises(SyncError, match="not a git working copy"):
            GitService(logger).clone_or_pull(request_factory(), tmp_path)
        assert fake_run.calls == []

    def test_git_missing(self, monkeypatch, request_factory, logger, tmp_path):
        def missing(*args, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(git_service.subprocess, "run", missing)

        with pytest.raises(SyncError, match="git executable not found"):
            GitService(logger).clone_or_pull(request_factory(), tmp_path)


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestGitServiceWithRealGit:
    """Clone and pull a local repository with the real git binary."""

    @pytest.fixture
    def origin(self, tmp_path):
        origin = tmp_path / "origin" / "webapp"
        origin.mkdir(parents=True)

        def git(*args):
            subprocess.run(
                ["git", "-c", "user.name=t", "-c", "user.email=t@example.com", *args],
                cwd=origin,
                check=True,
                capture_output=True,
            )

        git("init", "-q", "-b", "main")
        (origin / "Dockerfile").write_text("FROM alpine\n")
        git("add", ".")
        git("commit", "-q", "-m", "initial")
        return SimpleNamespace(path=origin, git=git)

    def test_clone_then_pull(self, origin, request_factory, logger, tmp_path):
        work = tmp_path / "work"
        request = request_factory(repo_url=str(origin.path))
        service = GitService(logger)

        repo_dir = service.clone_or_pull(request, work)
        assert (repo_dir / "Dockerfile").exists()

        (origin.path / "app.py").write_text("print('v2')\n")
        origin.git("add", ".")
        origin.git("commit", "-q", "-m", "second")

        service.clone_or_pull(request, work)
        assert (repo_dir / "app.py").read_text() == "print('v2')\n"

    def test_unknown_branch(self, origin, request_factory, logger, tmp_path):
        request = request_factory(repo_url=str(origin.path), branch="does-not-exist")

        with pytest.raises(SyncError):
            GitService(logger).clone_or_pull(request, tmp_path / "work")
