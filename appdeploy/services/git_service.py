"""Git service: clone or update the application repository."""

import os
import subprocess
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlsplit, urlunsplit

from appdeploy.exceptions import SyncError
from appdeploy.logger import DeployLogger
from appdeploy.models.request import DeploymentRequest
from appdeploy.models.results import ExecutionResult


def credential_url(repo_url: str, token: str) -> str:
    """
    Embed an access token into an HTTP(S) repository URL.

    Scheme-less URLs (github.com/org/repo.git) are treated as https.
    Other transports (ssh, scp-style, file, local paths) are returned
    unchanged since the token means nothing to them.
    """
    url = repo_url.strip()
    if "://" not in url:
        if url.startswith(("/", ".", "~")) or ("@" in url and ":" in url):
            return url
        url = f"https://{url}"

    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not token:
        return url

    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit(parts._replace(netloc=f"{quote(token, safe='')}@{host}"))


def public_url(repo_url: str) -> str:
    """Repository URL with any userinfo stripped."""
    url = repo_url.strip()
    if "://" not in url:
        return url
    parts = urlsplit(url)
    host = parts.netloc.rsplit("@", 1)[-1]
    return urlunsplit(parts._replace(netloc=host))


class GitService:
    """Runs git for the repository sync stage."""

    def __init__(self, logger: DeployLogger):
        self.logger = logger

    def _git(self, args: list[str], cwd: Optional[Path] = None) -> ExecutionResult:
        command = " ".join(["git", *args])
        self.logger.log_command(command)

        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=cwd,
                env=env,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError:
            raise SyncError("git executable not found", context="Install git and retry")

        if result.stdout:
            self.logger.log_output(result.stdout, "stdout")
        if result.stderr:
            self.logger.log_output(result.stderr, "stderr")

        return ExecutionResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            command=self.logger.mask(command),
        )

    def _fail(self, message: str, result: ExecutionResult) -> SyncError:
        detail = self.logger.mask(result.stderr.strip() or result.stdout.strip())
        return SyncError(message, context=detail or f"exit status {result.returncode}")

    def clone_or_pull(self, request: DeploymentRequest, workdir: Path) -> Path:
        """
        Clone the repository, or pull into an existing working copy.

        Args:
            request: Deployment request (URL, token, branch)
            workdir: Directory holding working copies

        Returns:
            Path of the working copy

        Raises:
            SyncError: On conflict, network or authentication failure
        """
        self.logger.register_secret(request.token)
        self.logger.register_secret(quote(request.token, safe=""))
        auth_url = credential_url(request.repo_url, request.token)

        repo_dir = Path(workdir) / request.repo_name
        if (repo_dir / ".git").is_dir():
            self.logger.log(f"Repository exists locally at {repo_dir}, pulling {request.branch}")
            self.pull(repo_dir, auth_url, request.branch)
        elif repo_dir.exists() and any(repo_dir.iterdir()):
            raise SyncError(
                f"{repo_dir} exists but is not a git working copy",
                context="Remove it or choose another working directory",
            )
        else:
            self.logger.log(f"Cloning {public_url(request.repo_url)} ({request.branch})")
            self.clone(repo_dir, auth_url, request.repo_url, request.branch)

        return repo_dir

    def clone(self, repo_dir: Path, auth_url: str, repo_url: str, branch: str) -> None:
        repo_dir.parent.mkdir(parents=True, exist_ok=True)
        result = self._git(["clone", "--branch", branch, auth_url, str(repo_dir)])
        if result.is_failure:
            raise self._fail("Git clone failed", result)

        # Keep the token out of .git/config
        clean_url = public_url(credential_url(repo_url, ""))
        if clean_url != auth_url:
            result = self._git(["remote", "set-url", "origin", clean_url], cwd=repo_dir)
            if result.is_failure:
                raise self._fail("Could not reset origin URL", result)

    def pull(self, repo_dir: Path, auth_url: str, branch: str) -> None:
        result = self._git(["checkout", branch], cwd=repo_dir)
        if result.is_failure:
            raise self._fail(f"Git checkout of '{branch}' failed", result)

        result = self._git(["pull", "--ff-only", auth_url, branch], cwd=repo_dir)
        if result.is_failure:
            raise self._fail("Git pull failed", result)
