"""
Merge required signoff contexts with the statuses recorded on a commit.

The report lists every required context first (the default ``signoff``
always leads), then any signoff statuses found on the commit that nobody
required, in the order GitHub returned them. Each canonical name appears
once.
"""
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from .contexts import DEFAULT_CONTEXT, SignoffContext, is_signoff_context

SUCCESS = "success"
FAILURE = "failure"


@dataclass(frozen=True)
class ReportEntry:
    """One line of ``status`` output."""

    context: SignoffContext
    state: str

    @property
    def passed(self) -> bool:
        return self.state == SUCCESS


def observed_statuses(payload: Optional[dict]) -> dict[str, str]:
    """
    Signoff statuses on a commit, keyed by canonical context name.

    Args:
        payload: Combined-status response (``{"statuses": [...]}``)

    Returns:
        Ordered mapping of context -> state. Non-signoff contexts are
        ignored; for repeated contexts the first record wins.
    """
    observed: dict[str, str] = {}
    if not isinstance(payload, dict):
        return observed

    statuses = payload.get("statuses")
    if not isinstance(statuses, list):
        return observed

    for status in statuses:
        if not isinstance(status, dict):
            continue
        name = status.get("context")
        if not is_signoff_context(name) or name in observed:
            continue
        observed[name] = str(status.get("state") or "")
    return observed


def reconcile(required: Iterable[SignoffContext],
              observed: Mapping[str, str]) -> list[ReportEntry]:
    """
    Build the status report.

    Args:
        required: Required contexts in protection order
        observed: Canonical name -> recorded state, in observed order

    Returns:
        Required contexts (with the default ``signoff`` prepended when
        missing) followed by observed-only contexts. A context passes only
        when its recorded state is ``success``.
    """
    report: list[ReportEntry] = []
    emitted: set[str] = set()

    def emit(context: SignoffContext, state: str) -> None:
        if context.canonical in emitted:
            return
        emitted.add(context.canonical)
        report.append(ReportEntry(context, state))

    def state_of(context: SignoffContext) -> str:
        return SUCCESS if observed.get(context.canonical) == SUCCESS else FAILURE

    emit(DEFAULT_CONTEXT, state_of(DEFAULT_CONTEXT))
    for context in required:
        emit(context, state_of(context))

    for name, state in observed.items():
        if not is_signoff_context(name):
            continue
        emit(SignoffContext.from_canonical(name), state)

    return report
