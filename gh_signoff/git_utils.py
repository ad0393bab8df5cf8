"""
Git operation helpers for gh-signoff.

Provides safe, read-only git operations for:
- Locating the repository and its root
- Reading the HEAD commit and the configured user name
- Checking that the working tree is clean and fully pushed
"""
import os
import subprocess
from dataclasses import dataclass
from typing import Optional


class GitError(RuntimeError):
    """A git command needed by signoff failed."""


class NotTrackingRemoteError(GitError):
    """The current branch has no upstream to compare against."""

    def __init__(self, message: str = "not tracking a remote branch"):
        super().__init__(message)


def run_git(args: list, cwd: Optional[str] = None, timeout: int = 10) -> tuple[int, str, str]:
    """
    Run a git command safely with timeout.

    Args:
        args: Arguments after ``git`` (e.g. ["rev-parse", "HEAD"])
        cwd: Working directory (defaults to current)
        timeout: Seconds before giving up

    Returns:
        Tuple of (exit_code, stdout, stderr)
        - exit_code: 0 for success, non-zero for failure
        - stdout: Command output (stripped)
        - stderr: Error output (stripped)
    """
    if cwd is None:
        cwd = os.getcwd()

    try:
        result = subprocess.run(
            ["git"] + list(args),
            capture_output=True,
            text=True,
            cwd=cwd,
            timeout=timeout,
        )
        return result.returncode, result.stdout.strip(), result.stderr.strip()
    except subprocess.TimeoutExpired:
        return -1, "", "timeout"
    except OSError as e:
        return -1, "", str(e)


def is_git_repo(project_dir: Optional[str] = None) -> bool:
    """
    Check if directory is inside a git repository.

    Args:
        project_dir: Directory to check (defaults to cwd)

    Returns:
        True if inside a git repo, False otherwise
    """
    code, _, _ = run_git(["rev-parse", "--git-dir"], project_dir)
    return code == 0


def get_git_root(project_dir: Optional[str] = None) -> Optional[str]:
    """
    Get the root directory of the git repository.

    Returns:
        Absolute path to git root, or None if not in a repo
    """
    code, root, _ = run_git(["rev-parse", "--show-toplevel"], project_dir)
    return root if code == 0 and root else None


def resolve_project_root(start_dir: Optional[str] = None) -> str:
    """Git root of ``start_dir`` (or cwd), falling back to the directory itself."""
    start = start_dir or os.getcwd()
    return get_git_root(start) or start


def get_current_branch(project_dir: Optional[str] = None) -> Optional[str]:
    """
    Get the current git branch name.

    Returns:
        Branch name, or None in detached HEAD state or outside a repo
    """
    code, branch, _ = run_git(["symbolic-ref", "--short", "HEAD"], project_dir)
    return branch if code == 0 and branch else None


def get_head_sha(project_dir: Optional[str] = None) -> str:
    """
    Full hash of the HEAD commit.

    Raises:
        GitError: If there is no commit (empty repo) or git fails
    """
    code, sha, stderr = run_git(["rev-parse", "HEAD"], project_dir)
    if code != 0 or not sha:
        raise GitError(stderr or "could not resolve HEAD commit")
    return sha


def get_user_name(project_dir: Optional[str] = None) -> Optional[str]:
    """Configured ``user.name``, or None if unset."""
    code, name, _ = run_git(["config", "user.name"], project_dir)
    return name if code == 0 and name else None


def get_upstream(project_dir: Optional[str] = None) -> Optional[str]:
    """Upstream tracking ref of the current branch (e.g. ``origin/main``)."""
    code, upstream, _ = run_git(
        ["rev-parse", "--abbrev-ref", "--symbolic-full-name", "@{upstream}"],
        project_dir,
    )
    return upstream if code == 0 and upstream else None


@dataclass(frozen=True)
class TreeStatus:
    """Local state that would make a signoff misleading."""

    uncommitted: bool
    unpushed: int

    @property
    def is_clean(self) -> bool:
        return not self.uncommitted and self.unpushed == 0


def has_uncommitted_changes(project_dir: Optional[str] = None) -> bool:
    """
    True if anything is staged, modified, or untracked.

    Raises:
        GitError: If git status fails
    """
    code, output, stderr = run_git(["status", "--porcelain"], project_dir)
    if code != 0:
        raise GitError(stderr or "git status failed")
    return bool(output)


def count_unpushed_commits(project_dir: Optional[str] = None) -> int:
    """
    Number of commits on HEAD that are not on the upstream.

    Raises:
        NotTrackingRemoteError: If the branch has no upstream
        GitError: If git rev-list fails
    """
    if get_upstream(project_dir) is None:
        raise NotTrackingRemoteError()

    code, output, stderr = run_git(["rev-list", "--count", "@{upstream}..HEAD"], project_dir)
    if code != 0:
        raise GitError(stderr or "git rev-list failed")
    try:
        return int(output)
    except ValueError:
        raise GitError(f"unexpected rev-list output: {output!r}")


def get_tree_status(project_dir: Optional[str] = None) -> TreeStatus:
    """
    Inspect the working tree and its upstream.

    Raises:
        NotTrackingRemoteError: If the branch has no upstream
    """
    uncommitted = has_uncommitted_changes(project_dir)
    unpushed = count_unpushed_commits(project_dir)
    return TreeStatus(uncommitted=uncommitted, unpushed=unpushed)


def is_clean(project_dir: Optional[str] = None) -> bool:
    """
    True if nothing is uncommitted and nothing is unpushed.

    Raises:
        NotTrackingRemoteError: If the branch has no upstream
    """
    return get_tree_status(project_dir).is_clean
