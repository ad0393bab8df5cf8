"""
gh-signoff command-line interface

Sign off on the current commit after testing locally, and manage the branch
protection that requires it.

Usage:
    gh-signoff [-f] [context ...]          # Sign off HEAD (default command)
    gh-signoff install [--branch B] [ctx]  # Require signoff on a branch
    gh-signoff uninstall [--branch B]      # Remove branch protection
    gh-signoff check [--branch B] [ctx]    # Is signoff required?
    gh-signoff status [--branch B]         # Signoff state of HEAD
    gh-signoff completion [--shell zsh]    # Shell completion script
    gh-signoff version
"""
import argparse
import shutil
import sys
from typing import Optional

from . import __version__
from .colors import Symbol, dim, error, success, warning
from .completion import SHELLS, render_completion, render_contexts
from .config import SignoffConfig
from .contexts import (
    contexts_from_args,
    fetch_required_labels,
    protection_requires,
    required_set,
)
from .git_utils import (
    GitError,
    NotTrackingRemoteError,
    get_head_sha,
    get_tree_status,
    get_user_name,
    is_git_repo,
    resolve_project_root,
)
from .github_client import GitHubAPIError, GitHubClient
from .interactive import confirm, is_interactive
from .logger import get_logger
from .reconcile import observed_statuses, reconcile

PROG = 'gh-signoff'
COMMANDS = ('create', 'install', 'uninstall', 'check', 'status', 'version', 'completion', 'help')
# Verbs whose positional arguments are context names
CONTEXT_COMMANDS = {'create', 'install', 'uninstall', 'check', 'status'}


class SignoffArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit code 1.

    Long options must be spelled out: ``--br`` is an unknown flag, not
    ``--branch``.
    """

    def __init__(self, *args, **kwargs):
        kwargs.setdefault('allow_abbrev', False)
        super().__init__(*args, **kwargs)

    def error(self, message: str):
        self.print_usage(sys.stderr)
        print(error(f"Error: {message}"), file=sys.stderr)
        sys.exit(1)


def fail(message: str) -> int:
    """Print a one-line error and return the failure exit code."""
    print(error(f"Error: {message}"), file=sys.stderr)
    return 1


def missing_tools(tools: tuple) -> list[str]:
    """Names of required executables not found on PATH."""
    return [tool for tool in tools if shutil.which(tool) is None]


TOOL_HINTS = {
    'git': 'https://git-scm.com',
    'gh': 'https://cli.github.com',
}


class Invocation:
    """Per-invocation collaborators: project dir, config, logger and API client."""

    def __init__(self, args):
        self.project_dir = resolve_project_root()
        self.config = SignoffConfig(self.project_dir)
        self.logger = get_logger(
            self.config.get_logging_config(),
            base_context={'command': args.command, 'project_dir': self.project_dir},
        )
        self.client = GitHubClient(repo=self.config.get_repo(), cwd=self.project_dir)

    def target_branch(self, branch: Optional[str]) -> str:
        """
        ``branch`` or the repository default branch.

        Raises:
            GitHubAPIError: If the default branch cannot be fetched
        """
        if branch:
            return branch
        return self.client.get_default_branch()


def _empty_branch(args) -> bool:
    return args.branch is not None and not args.branch.strip()


def _check_tools(*tools: str) -> Optional[int]:
    missing = missing_tools(tools)
    if not missing:
        return None
    tool = missing[0]
    return fail(f"{PROG} requires {tool} ({TOOL_HINTS.get(tool, 'install it first')})")


def _parse_contexts(args):
    """Contexts from positional args; ValueError for bad names."""
    return contexts_from_args(getattr(args, 'contexts', None))


def _describe(contexts) -> str:
    return ', '.join(context.display for context in contexts)


def cmd_create(args) -> int:
    """
    Post a successful signoff status for HEAD.

    Each context is posted left to right; a failed post is reported and the
    remaining contexts are still attempted.
    """
    code = _check_tools('git', 'gh')
    if code is not None:
        return code

    try:
        contexts = _parse_contexts(args)
    except ValueError as e:
        return fail(str(e))

    invocation = Invocation(args)
    project_dir = invocation.project_dir
    logger = invocation.logger

    if not is_git_repo(project_dir):
        return fail("not in a git repository")

    if not args.force:
        try:
            tree = get_tree_status(project_dir)
        except NotTrackingRemoteError as e:
            return fail(str(e))
        except GitError as e:
            return fail(f"could not inspect working tree: {e}")

        if tree.uncommitted:
            logger.info("Refusing signoff with uncommitted changes")
            return fail("you have uncommitted changes; commit or stash them first (or use -f)")
        if tree.unpushed:
            logger.info("Refusing signoff with unpushed commits", unpushed=tree.unpushed)
            return fail(f"you have {tree.unpushed} unpushed commit(s); push them first (or use -f)")

    try:
        sha = get_head_sha(project_dir)
    except GitError as e:
        return fail(str(e))

    user = get_user_name(project_dir)
    if not user:
        return fail("git user.name is not set (git config user.name \"Your Name\")")

    description = f"{user} signed off"
    short_sha = sha[:7]
    logger = logger.bind(sha=sha)
    failed = False

    for context in contexts:
        target = f" for {context.display}" if not context.is_default else ""
        try:
            invocation.client.create_status(sha, context.canonical, description)
        except GitHubAPIError as e:
            failed = True
            logger.error("Signoff failed", context=context.canonical, error=str(e))
            print(error(f"{Symbol.FAILURE} Failed to sign off on {short_sha}{target}: {e}"),
                  file=sys.stderr)
            continue
        logger.info("Signed off", context=context.canonical)
        print(success(f"{Symbol.SUCCESS} Signed off on {short_sha}{target}"))

    return 1 if failed else 0


def cmd_install(args) -> int:
    """Require signoff contexts on a branch via branch protection."""
    code = _check_tools('gh')
    if code is not None:
        return code

    if _empty_branch(args):
        return fail("--branch cannot be empty")

    try:
        contexts = _parse_contexts(args)
    except ValueError as e:
        return fail(str(e))

    invocation = Invocation(args)
    try:
        branch = invocation.target_branch(args.branch)
        invocation.client.set_branch_protection(branch, [c.canonical for c in contexts])
    except GitHubAPIError as e:
        invocation.logger.error("Install failed", branch=args.branch, error=str(e))
        return fail(f"could not update branch protection: {e}")

    invocation.logger.info("Installed", branch=branch, contexts=[c.canonical for c in contexts])
    if len(contexts) == 1 and contexts[0].is_default:
        print(success(f"{Symbol.SUCCESS} Signoff is now required on {branch}"))
    else:
        print(success(f"{Symbol.SUCCESS} Signoff for {_describe(contexts)} is now required on {branch}"))
    return 0


def cmd_uninstall(args) -> int:
    """
    Remove branch protection.

    GitHub's API deletes the whole protection rule, so this also drops any
    non-signoff requirements on the branch. The user is warned, and asked
    to confirm when running interactively.
    """
    code = _check_tools('gh')
    if code is not None:
        return code

    if _empty_branch(args):
        return fail("--branch cannot be empty")

    try:
        contexts = _parse_contexts(args)
    except ValueError as e:
        return fail(str(e))

    invocation = Invocation(args)
    try:
        branch = invocation.target_branch(args.branch)
    except GitHubAPIError as e:
        return fail(f"could not determine default branch: {e}")

    print(warning(f"⚠️  This removes ALL branch protection on {branch}, "
                  f"not only the {_describe(contexts)} requirement"), file=sys.stderr)
    if not args.yes and is_interactive():
        if not confirm(f"Remove branch protection from {branch}?", default=False):
            print(dim("Aborted"), file=sys.stderr)
            return 1

    try:
        invocation.client.delete_branch_protection(branch)
    except GitHubAPIError as e:
        invocation.logger.error("Uninstall failed", branch=branch, error=str(e))
        return fail(f"could not remove branch protection: {e}")

    invocation.logger.info("Uninstalled", branch=branch)
    print(success(f"{Symbol.SUCCESS} Signoff is no longer required on {branch}"))
    return 0


def cmd_check(args) -> int:
    """Report whether each context is required on a branch."""
    code = _check_tools('gh')
    if code is not None:
        return code

    if _empty_branch(args):
        return fail("--branch cannot be empty")

    try:
        contexts = _parse_contexts(args)
    except ValueError as e:
        return fail(str(e))

    invocation = Invocation(args)
    try:
        branch = invocation.target_branch(args.branch)
        protection = invocation.client.get_branch_protection(branch)
    except GitHubAPIError as e:
        invocation.logger.error("Check failed", branch=args.branch, error=str(e))
        return fail(f"could not fetch branch protection: {e}")

    for context in contexts:
        if protection_requires(protection, context):
            print(success(f"{Symbol.SUCCESS} {context.display} is required on {branch}"))
        else:
            print(error(f"{Symbol.FAILURE} {context.display} is not required on {branch}"))
    return 0


def cmd_status(args) -> int:
    """Print the signoff state of HEAD, one line per context."""
    code = _check_tools('git', 'gh')
    if code is not None:
        return code

    if _empty_branch(args):
        return fail("--branch cannot be empty")

    try:
        extra = [c.label for c in _parse_contexts(args)]
    except ValueError as e:
        return fail(str(e))

    invocation = Invocation(args)
    logger = invocation.logger

    if not is_git_repo(invocation.project_dir):
        return fail("not in a git repository")

    try:
        sha = get_head_sha(invocation.project_dir)
    except GitError as e:
        return fail(str(e))

    labels: list[str] = []
    try:
        branch = invocation.target_branch(args.branch)
    except GitHubAPIError as e:
        logger.warning("Default branch unavailable", error=str(e))
    else:
        labels = fetch_required_labels(invocation.client, branch, logger)

    try:
        combined = invocation.client.get_combined_status(sha)
    except GitHubAPIError as e:
        logger.error("Status fetch failed", sha=sha, error=str(e))
        return fail(f"could not fetch commit status: {e}")

    report = reconcile(required_set(labels + extra), observed_statuses(combined))
    for entry in report:
        if entry.passed:
            print(success(f"{Symbol.SUCCESS} {entry.context.display}"))
        else:
            print(error(f"{Symbol.FAILURE} {entry.context.display}"))
    return 0


def cmd_version(args) -> int:
    print(f"{PROG} {__version__}")
    return 0


def cmd_completion(args) -> int:
    """Print a completion script, or the context names it completes."""
    if not args.contexts:
        print(render_completion(args.shell, PROG), end='')
        return 0

    # Completion must never break the shell: any failure prints nothing
    if missing_tools(('gh',)):
        return 0
    invocation = Invocation(args)
    try:
        branch = invocation.target_branch(None)
    except GitHubAPIError:
        return 0
    labels = fetch_required_labels(invocation.client, branch, invocation.logger)
    if labels:
        print(render_contexts(labels))
    return 0


def build_parser() -> tuple[argparse.ArgumentParser, dict]:
    """Top-level parser plus the per-command subparsers (for ``help <cmd>``)."""
    parser = SignoffArgumentParser(
        prog=PROG,
        description='Sign off on commits you tested locally, and require signoff before merging.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog='''
Examples:
    gh-signoff                          # Sign off HEAD
    gh-signoff tests lint               # Sign off as signoff/tests and signoff/lint
    gh-signoff -f                       # Skip the clean/pushed check
    gh-signoff install                  # Require signoff on the default branch
    gh-signoff install --branch main tests lint
    gh-signoff check tests              # Is signoff/tests required?
    gh-signoff status                   # Which signoffs does HEAD have?
    eval "$(gh-signoff completion)"     # Enable bash completion

Configuration:
    ~/.config/gh-signoff/config.yaml, .signoff.yaml, .signoff.local.yaml
'''
    )

    subparsers = parser.add_subparsers(dest='command', metavar='command')
    verb_parsers = {}

    # create
    p = subparsers.add_parser('create', help='Sign off on the current commit (default)')
    p.add_argument('contexts', nargs='*', metavar='context', help='Context label(s) (default: signoff)')
    p.add_argument('--force', '-f', action='store_true', help='Skip the clean and pushed check')
    verb_parsers['create'] = p

    # install / uninstall / check / status
    for name, text in (
        ('install', 'Require signoff on a branch'),
        ('uninstall', 'Remove branch protection (all of it)'),
        ('check', 'Check whether signoff is required on a branch'),
        ('status', 'Show signoff status of the current commit'),
    ):
        p = subparsers.add_parser(name, help=text)
        p.add_argument('contexts', nargs='*', metavar='context', help='Context label(s)')
        p.add_argument('--branch', metavar='NAME', help='Branch (default: repository default branch)')
        verb_parsers[name] = p

    verb_parsers['uninstall'].add_argument('--yes', '-y', action='store_true',
                                           help='Do not ask for confirmation')

    # version
    verb_parsers['version'] = subparsers.add_parser('version', help='Show version')

    # completion
    p = subparsers.add_parser('completion', help='Print shell completion script')
    p.add_argument('--contexts', action='store_true', help='List context labels for completion')
    p.add_argument('--shell', choices=SHELLS, default='bash', help='Target shell (default: bash)')
    verb_parsers['completion'] = p

    # help
    p = subparsers.add_parser('help', help='Show help')
    p.add_argument('topic', nargs='?', choices=COMMANDS, help='Command to describe')
    verb_parsers['help'] = p

    return parser, verb_parsers


def _normalize_argv(argv: list) -> list:
    """Make ``create`` the default command and map -h/--help to ``help``."""
    if not argv:
        return ['create']
    if argv[0] in ('-h', '--help'):
        return ['help'] + argv[1:]
    if argv[0] in COMMANDS:
        return argv
    return ['create'] + argv


def main(argv: Optional[list] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser, verb_parsers = build_parser()

    args, extras = parser.parse_known_args(_normalize_argv(argv))

    # Contexts may follow flags (``-f tests lint``): argparse leaves those
    # positionals in extras
    unknown = [e for e in extras if e.startswith('-') or args.command not in CONTEXT_COMMANDS]
    if unknown:
        # Verb usage, not the top-level one
        verb_parser = verb_parsers.get(args.command, parser)
        verb_parser.error(f"unrecognized arguments: {' '.join(unknown)}")
    if args.command in CONTEXT_COMMANDS:
        args.contexts = list(args.contexts) + extras

    if args.command == 'help':
        target = verb_parsers.get(args.topic) if args.topic else parser
        target.print_help()
        return 0

    commands = {
        'create': cmd_create,
        'install': cmd_install,
        'uninstall': cmd_uninstall,
        'check': cmd_check,
        'status': cmd_status,
        'version': cmd_version,
        'completion': cmd_completion,
    }

    return commands[args.command](args)


if __name__ == '__main__':
    sys.exit(main())
