"""
gh-signoff

Local CI for GitHub: sign off on a commit after running the tests on your own
machine, and require that signoff before a pull request can merge.

Architecture:
- contexts.py: SignoffContext value type, branch-protection context parsing
- reconcile.py: Merge required contexts with observed commit statuses
- git_utils.py: Git operations (HEAD, user, clean-tree check)
- github_client.py: GitHub REST calls through `gh api`
- config.py: Configuration loading (global → project → local)
- cli.py: Command-line entry point

Usage:
    from gh_signoff.contexts import SignoffContext, required_set
    from gh_signoff.reconcile import reconcile, observed_statuses

    required = required_set(['tests', 'lint'])
    report = reconcile(required, observed_statuses(client.get_combined_status(sha)))

    for entry in report:
        print(entry.context.display, entry.passed)
"""

__version__ = "1.0.0"
