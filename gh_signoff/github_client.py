"""
GitHub REST calls through the `gh` command-line client.

`gh api` handles authentication, hosts and HTTP; this module only builds the
request paths and bodies and decodes the JSON it prints. Paths use gh's
``{owner}/{repo}`` placeholders unless an explicit ``owner/name`` is given.
"""
import json
import re
import subprocess
from typing import Any, Callable, Optional
from urllib.parse import quote

HTTP_STATUS_PATTERN = re.compile(r"\(HTTP (\d{3})\)")

Runner = Callable[[list, Optional[str], Optional[str]], tuple]


class GitHubAPIError(RuntimeError):
    """A `gh api` call failed."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status

    @property
    def not_found(self) -> bool:
        return self.status == 404


def run_gh(args: list, stdin: Optional[str] = None, cwd: Optional[str] = None) -> tuple[int, str, str]:
    """
    Run a gh command.

    Args:
        args: Arguments after ``gh`` (e.g. ["api", "repos/{owner}/{repo}"])
        stdin: Text fed to the process (request bodies)
        cwd: Working directory (defaults to current)

    Returns:
        Tuple of (exit_code, stdout, stderr), output stripped
    """
    try:
        result = subprocess.run(
            ["gh"] + list(args),
            input=stdin,
            capture_output=True,
            text=True,
            cwd=cwd,
        )
    except OSError as e:
        return -1, "", str(e)
    return result.returncode, result.stdout.strip(), result.stderr.strip()


def _status_from_stderr(stderr: str) -> Optional[int]:
    match = HTTP_STATUS_PATTERN.search(stderr or "")
    return int(match.group(1)) if match else None


class GitHubClient:
    """
    Thin wrapper over `gh api` for the endpoints signoff needs.

    Args:
        repo: ``owner/name``; defaults to gh's placeholders for the current checkout
        cwd: Directory gh runs in (decides which checkout the placeholders resolve to)
        runner: Replacement for run_gh (tests)
    """

    def __init__(self, repo: Optional[str] = None, cwd: Optional[str] = None,
                 runner: Optional[Runner] = None):
        self.repo = repo or "{owner}/{repo}"
        self.cwd = cwd
        self._run = runner or run_gh

    def _repo_path(self, suffix: str = "") -> str:
        return f"repos/{self.repo}{suffix}"

    def api(self, method: str, path: str, payload: Optional[dict] = None) -> Any:
        """
        Perform one request.

        Returns:
            Decoded JSON response, or None for empty bodies (204)

        Raises:
            GitHubAPIError: On non-zero gh exit or undecodable output
        """
        args = ["api", "--method", method, path]
        body = None
        if payload is not None:
            args.extend(["--input", "-"])
            body = json.dumps(payload)

        code, stdout, stderr = self._run(args, body, self.cwd)
        if code != 0:
            message = stderr or f"gh api {method} {path} failed"
            raise GitHubAPIError(message, status=_status_from_stderr(stderr))

        if not stdout:
            return None
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise GitHubAPIError(f"invalid JSON from gh api {method} {path}: {e}") from e

    def get_default_branch(self) -> str:
        data = self.api("GET", self._repo_path())
        branch = data.get("default_branch") if isinstance(data, dict) else None
        if not branch:
            raise GitHubAPIError("repository has no default branch")
        return branch

    def get_branch_protection(self, branch: str) -> Optional[dict]:
        """Protection for ``branch``, or None if the branch is not protected."""
        try:
            return self.api("GET", self._branch_protection_path(branch))
        except GitHubAPIError as e:
            if e.not_found:
                return None
            raise

    def get_combined_status(self, sha: str) -> dict:
        return self.api("GET", self._repo_path(f"/commits/{sha}/status")) or {}

    def create_status(self, sha: str, context: str, description: str,
                      state: str = "success") -> dict:
        payload = {
            "state": state,
            "context": context,
            "description": description,
        }
        return self.api("POST", self._repo_path(f"/statuses/{sha}"), payload)

    def set_branch_protection(self, branch: str, contexts: list[str]) -> dict:
        """Require ``contexts`` on ``branch``, replacing any existing protection."""
        payload = {
            "required_status_checks": {
                "strict": False,
                "contexts": list(contexts),
            },
            "enforce_admins": False,
            "required_pull_request_reviews": None,
            "restrictions": None,
        }
        return self.api("PUT", self._branch_protection_path(branch), payload)

    def delete_branch_protection(self, branch: str) -> None:
        self.api("DELETE", self._branch_protection_path(branch))

    def _branch_protection_path(self, branch: str) -> str:
        return self._repo_path(f"/branches/{quote(branch, safe='')}/protection")
