"""
Shared test helpers: TestRunner, throwaway git repositories, a fake GitHub
client and an in-process CLI runner.
"""
import contextlib
import io
import os
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Optional
from unittest import mock

# Make the package importable when running from a checkout
repo_root = Path(__file__).resolve().parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from gh_signoff import colors  # noqa: E402
from gh_signoff.github_client import GitHubAPIError  # noqa: E402


class TestRunner:
    """Simple test runner with assertions."""

    __test__ = False

    def __init__(self):
        self.passed = 0
        self.failed = 0
        self.errors = []

    def test(self, name: str, condition: bool, msg: str = ""):
        """Run a single test assertion."""
        if condition:
            print(f"  ✅ {name}")
            self.passed += 1
        else:
            print(f"  ❌ {name}: {msg}")
            self.failed += 1
            self.errors.append(f"{name}: {msg}")

    def summary(self) -> int:
        """Print summary and return exit code."""
        total = self.passed + self.failed
        print()
        print(f"{'='*50}")
        print(f"Results: {self.passed}/{total} tests passed")
        if self.errors:
            print("\nFailures:")
            for err in self.errors:
                print(f"  - {err}")
        return 0 if self.failed == 0 else 1


def git(cwd, *args) -> subprocess.CompletedProcess:
    return subprocess.run(
        ['git', '-c', 'commit.gpgsign=false', *args],
        cwd=cwd, capture_output=True, text=True, check=True,
    )


def setup_git_repo(path: Path, branch_name: str = 'main') -> None:
    """Initialize a git repo with one commit."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, 'init')
    git(path, 'config', 'user.email', 'test@test.com')
    git(path, 'config', 'user.name', 'Test User')
    (path / 'README').write_text('hello\n')
    git(path, 'add', 'README')
    git(path, 'commit', '-m', 'initial')
    git(path, 'branch', '-M', branch_name)


def setup_tracked_repo(tmpdir: str, branch_name: str = 'main') -> Path:
    """Working copy at <tmpdir>/work pushed to a bare <tmpdir>/origin.git."""
    origin = Path(tmpdir) / 'origin.git'
    work = Path(tmpdir) / 'work'
    git(tmpdir, 'init', '--bare', str(origin))
    setup_git_repo(work, branch_name)
    git(work, 'remote', 'add', 'origin', str(origin))
    git(work, 'push', '-u', 'origin', branch_name)
    return work


def commit_file(repo: Path, name: str, content: str = 'x\n') -> None:
    (repo / name).write_text(content)
    git(repo, 'add', name)
    git(repo, 'commit', '-m', f'add {name}')


class FakeGitHubClient:
    """Records calls; answers from canned data."""

    def __init__(self, default_branch: str = 'main', protection: Optional[dict] = None,
                 statuses: Optional[list] = None, fail_contexts=(),
                 protection_error: Optional[GitHubAPIError] = None,
                 status_error: Optional[GitHubAPIError] = None,
                 write_error: Optional[GitHubAPIError] = None):
        self.default_branch = default_branch
        self.protection = protection
        self.statuses = statuses or []
        self.fail_contexts = set(fail_contexts)
        self.protection_error = protection_error
        self.status_error = status_error
        self.write_error = write_error
        self.calls = []

    def get_default_branch(self) -> str:
        self.calls.append(('get_default_branch',))
        return self.default_branch

    def get_branch_protection(self, branch):
        self.calls.append(('get_branch_protection', branch))
        if self.protection_error is not None:
            raise self.protection_error
        return self.protection

    def get_combined_status(self, sha):
        self.calls.append(('get_combined_status', sha))
        if self.status_error is not None:
            raise self.status_error
        return {'sha': sha, 'statuses': list(self.statuses)}

    def create_status(self, sha, context, description, state='success'):
        self.calls.append(('create_status', sha, context, description))
        if context in self.fail_contexts:
            raise GitHubAPIError(f'gh: Validation Failed for {context} (HTTP 422)', status=422)
        return {'context': context, 'state': state}

    def set_branch_protection(self, branch, contexts):
        self.calls.append(('set_branch_protection', branch, list(contexts)))
        if self.write_error is not None:
            raise self.write_error
        return {}

    def delete_branch_protection(self, branch):
        self.calls.append(('delete_branch_protection', branch))
        if self.write_error is not None:
            raise self.write_error


def remote_calls(client: FakeGitHubClient) -> list:
    return [call[0] for call in client.calls]


def run_cli(argv: list, cwd, client: Optional[FakeGitHubClient] = None,
            config_dir: Optional[Path] = None) -> tuple[int, str, str]:
    """
    Run gh_signoff.cli.main in-process.

    Returns:
        (exit_code, stdout, stderr)
    """
    from gh_signoff import cli

    colors._color_enabled = False
    client = client or FakeGitHubClient()
    out, err = io.StringIO(), io.StringIO()
    previous = os.getcwd()
    home = tempfile.TemporaryDirectory()
    config_dir = Path(config_dir or home.name)
    os.chdir(cwd)
    try:
        with mock.patch.object(cli, 'GitHubClient', return_value=client), \
                mock.patch.object(cli, 'missing_tools', return_value=[]), \
                mock.patch('gh_signoff.config.get_global_config_dir', return_value=config_dir), \
                contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            try:
                code = cli.main(argv)
            except SystemExit as e:
                code = e.code if isinstance(e.code, int) else 1
    finally:
        os.chdir(previous)
        home.cleanup()
    return code, out.getvalue(), err.getvalue()
