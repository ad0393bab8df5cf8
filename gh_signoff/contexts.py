"""
Signoff context names.

A signoff context is a commit-status name in the "signoff" family: either the
bare ``signoff`` or ``signoff/<label>``. The full name is what GitHub stores
(canonical form); the label is what people type and read (display form).

    SignoffContext.from_label('tests').canonical      # 'signoff/tests'
    SignoffContext.from_canonical('signoff').label    # ''
"""
from dataclasses import dataclass
from typing import Iterable, Optional

from .github_client import GitHubAPIError

FAMILY = "signoff"
PREFIX = FAMILY + "/"


def is_signoff_context(name: object) -> bool:
    """True if ``name`` is ``signoff`` or starts with ``signoff/``."""
    if not isinstance(name, str):
        return False
    return name == FAMILY or (name.startswith(PREFIX) and len(name) > len(PREFIX))


@dataclass(frozen=True)
class SignoffContext:
    """One logical check, viewable as canonical name or display label."""

    label: str = ""

    @classmethod
    def from_label(cls, label: str) -> "SignoffContext":
        return cls(label=label)

    @classmethod
    def from_canonical(cls, name: str) -> "SignoffContext":
        """
        Build from the full status context name.

        Raises:
            ValueError: If the name is outside the signoff family
        """
        if not is_signoff_context(name):
            raise ValueError(f"not a signoff context: {name!r}")
        if name == FAMILY:
            return cls()
        return cls(label=name[len(PREFIX):])

    @classmethod
    def parse(cls, token: str) -> "SignoffContext":
        """
        Parse a context as typed on the command line.

        Accepts a bare label (``tests``) or a canonical name
        (``signoff/tests``, ``signoff``).

        Raises:
            ValueError: If the token is empty or contains whitespace
        """
        token = token.strip() if isinstance(token, str) else ""
        if not token:
            raise ValueError("context name cannot be empty")
        if any(ch.isspace() for ch in token):
            raise ValueError(f"context name cannot contain whitespace: {token!r}")
        if is_signoff_context(token):
            return cls.from_canonical(token)
        if token == PREFIX:
            raise ValueError(f"context label missing after {PREFIX!r}")
        return cls.from_label(token)

    @property
    def canonical(self) -> str:
        return f"{PREFIX}{self.label}" if self.label else FAMILY

    @property
    def display(self) -> str:
        """Label for output; the default context prints as ``signoff``."""
        return self.label or FAMILY

    @property
    def is_default(self) -> bool:
        return not self.label

    def __str__(self) -> str:
        return self.display


DEFAULT_CONTEXT = SignoffContext()


def unique_contexts(contexts: Iterable[SignoffContext]) -> list[SignoffContext]:
    """Drop repeats by canonical name, keeping first-seen order."""
    seen: set[str] = set()
    result = []
    for context in contexts:
        if context.canonical in seen:
            continue
        seen.add(context.canonical)
        result.append(context)
    return result


def contexts_from_args(tokens: Optional[Iterable[str]]) -> list[SignoffContext]:
    """
    Map positional command-line tokens to contexts.

    No tokens means the single default ``signoff`` context.
    """
    parsed = [SignoffContext.parse(token) for token in (tokens or [])]
    if not parsed:
        return [DEFAULT_CONTEXT]
    return unique_contexts(parsed)


def required_set(labels: Iterable[str]) -> list[SignoffContext]:
    """
    Build the required contexts: default ``signoff`` first, then ``labels``.
    """
    contexts = [DEFAULT_CONTEXT]
    contexts.extend(SignoffContext.from_label(label) for label in labels)
    return unique_contexts(contexts)


def _protection_check_names(payload: dict) -> list[str]:
    checks = payload.get("required_status_checks")
    if not isinstance(checks, dict):
        return []

    names = []
    contexts = checks.get("contexts")
    if isinstance(contexts, list):
        names.extend(contexts)

    # Newer API responses also list checks as {context, app_id}
    check_objects = checks.get("checks")
    if isinstance(check_objects, list):
        for check in check_objects:
            if isinstance(check, dict):
                names.append(check.get("context"))

    return names


def parse_protection_contexts(payload: Optional[dict]) -> list[str]:
    """
    Extract signoff labels from a branch-protection payload.

    Args:
        payload: Branch protection as returned by GitHub, or None when the
            branch is not protected

    Returns:
        Labels (``signoff/`` stripped) of every required signoff-family
        check, in API order, without duplicates. The bare ``signoff`` is
        implicit and never included.
    """
    if not isinstance(payload, dict):
        return []

    labels: list[str] = []
    for name in _protection_check_names(payload):
        if not is_signoff_context(name) or name == FAMILY:
            continue
        label = SignoffContext.from_canonical(name).label
        if label not in labels:
            labels.append(label)
    return labels


def protection_requires(payload: Optional[dict], context: SignoffContext) -> bool:
    """True if ``payload`` lists ``context`` as a required status check."""
    if not isinstance(payload, dict):
        return False
    return context.canonical in _protection_check_names(payload)


def fetch_required_labels(client, branch: str, logger=None) -> list[str]:
    """
    Fetch and parse the signoff labels required on ``branch``.

    Missing protection and API failures both mean "nothing required".
    """
    try:
        payload = client.get_branch_protection(branch)
    except GitHubAPIError as e:
        if logger is not None:
            logger.warning("Branch protection unavailable", branch=branch, error=str(e))
        return []
    return parse_protection_contexts(payload)
