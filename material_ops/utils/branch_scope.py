"""
utils/branch_scope.py

Branch isolation for supervisor / subcontractor operators.

When the session has a selected branch and the role is branch-scoped, list
requests carry `selectedBranchId` and the returned records are filtered again
on the client to those whose site fields name the selected branch. Server-side
authorization still applies; this is an extra filter, not a replacement.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

from .helpers import field
from .validators import same_text

T = TypeVar("T")

# attribute names checked on API dataclasses (and their wire-name equivalents on dicts)
SITE_FIELDS: Sequence[str] = (
    "from_site", "to_site", "delivery_site",
    "from", "to", "fromSite", "toSite", "deliverySite",
)


def active_branch(session) -> Optional[object]:
    """The selected branch when scoping applies to this session, else None."""
    if session is None or not getattr(session, "is_branch_scoped", False):
        return None
    return getattr(session, "selected_branch", None)


def branch_params(session, params: Optional[Dict[str, object]] = None) -> Dict[str, object]:
    out = dict(params or {})
    branch = active_branch(session)
    if branch is not None and branch.id:
        out["selectedBranchId"] = branch.id
    return out


def record_in_branch(record, branch_name: str, fields: Sequence[str] = SITE_FIELDS) -> bool:
    for name in fields:
        value = field(record, name)
        if value and same_text(value, branch_name):
            return True
    return False


def scope_records(session, records: Iterable[T], fields: Sequence[str] = SITE_FIELDS) -> List[T]:
    records = list(records)
    branch = active_branch(session)
    if branch is None or not branch.name:
        return records
    return [r for r in records if record_in_branch(r, branch.name, fields)]
