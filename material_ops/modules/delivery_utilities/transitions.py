"""Purchase order / site transfer status lifecycle."""
from __future__ import annotations

from ...constants import (
    RECORD_APPROVED,
    RECORD_CANCELLED,
    RECORD_PENDING,
    RECORD_STATUSES,
    RECORD_TRANSFERRED,
)
from .errors import StatusTransitionError

# pending -> approved -> transferred; cancelled from any non-terminal state
ALLOWED: dict[str, frozenset[str]] = {
    RECORD_PENDING: frozenset({RECORD_APPROVED, RECORD_CANCELLED}),
    RECORD_APPROVED: frozenset({RECORD_TRANSFERRED, RECORD_CANCELLED}),
    RECORD_TRANSFERRED: frozenset(),
    RECORD_CANCELLED: frozenset(),
}
TERMINAL: frozenset[str] = frozenset({RECORD_TRANSFERRED, RECORD_CANCELLED})


def normalize(status) -> str:
    return str(status or "").strip().lower()


def can_transition(current, new) -> bool:
    cur, nxt = normalize(current), normalize(new)
    if cur not in RECORD_STATUSES or nxt not in RECORD_STATUSES:
        return False
    if cur == nxt:
        return True
    return nxt in ALLOWED[cur]


def ensure_transition(current, new) -> str:
    """Normalized target status, or StatusTransitionError."""
    if not can_transition(current, new):
        raise StatusTransitionError(normalize(current), normalize(new))
    return normalize(new)


def next_statuses(current) -> list[str]:
    """Statuses offered in the admin edit combo, current first."""
    cur = normalize(current)
    if cur not in ALLOWED:
        return list(RECORD_STATUSES)
    return [cur] + [s for s in RECORD_STATUSES if s in ALLOWED[cur]]
