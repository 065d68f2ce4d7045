from __future__ import annotations

from typing import Any, Dict, Iterable, Optional, Sequence

from ...constants import (
    DELIVERY_PARTIAL,
    DELIVERY_PENDING,
    DELIVERY_STATUSES,
    DELIVERY_TRANSFERRED,
)
from ...utils.helpers import field
from .errors import QuantityValidationError
from .validation import item_key

# ---------- Canonical set & order ----------
STATUS_ORDER: dict[str, int] = {s: i for i, s in enumerate(DELIVERY_STATUSES)}  # Pending=0,...,Transferred=2

# ---------- Human labels ----------
LABELS = {
    "pending": DELIVERY_PENDING,
    "partial": DELIVERY_PARTIAL,
    "transferred": DELIVERY_TRANSFERRED,
}

DESCRIPTIONS = {
    "pending": "Nothing received yet.",
    "partial": "Some items received; at least one still short.",
    "transferred": "Every item received in full. Visible as a GRN.",
}

# Badge colours: Pending grey, Partial orange, Transferred green
STYLES = {
    "pending":     {"badge": "neutral", "fg": "#374151", "bg": "#F3F4F6"},
    "partial":     {"badge": "warning", "fg": "#9A3412", "bg": "#FFEDD5"},
    "transferred": {"badge": "success", "fg": "#065F46", "bg": "#D1FAE5"},
}


# ---------- API ----------

def normalize(status: Optional[str]) -> Optional[str]:
    """Canonical capitalised status ('Partial'), or None for empty/unknown values."""
    if status is None:
        return None
    return LABELS.get(str(status).strip().lower())


def label(status: str) -> str:
    s = normalize(status)
    return s if s else (status or "").strip().title()


def description(status: str) -> str:
    return DESCRIPTIONS.get(str(status or "").strip().lower(), "")


def style_tokens(status: str) -> dict:
    """Unknown statuses fall back to the neutral (Pending) style."""
    return STYLES.get(str(status or "").strip().lower(), STYLES["pending"])


def sort_key(status: str) -> int:
    s = normalize(status)
    return STATUS_ORDER.get(s, 999) if s else 999


def _quantities(item: Any) -> tuple[float, float]:
    return float(field(item, "st_quantity", 0) or 0), float(field(item, "received_quantity", 0) or 0)


def derive_status(items: Iterable[Any]) -> str:
    """
    Canonical delivery status from line items.

    Transferred: at least one item and every received_quantity >= st_quantity.
    Partial:     something received but not everything.
    Pending:     nothing received (includes an empty list).

    Every item must satisfy 0 <= received_quantity <= st_quantity; violations
    raise QuantityValidationError listing all offending items.
    """
    items = list(items)
    errors: Dict[str, str] = {}
    any_received = False
    all_full = True
    for idx, item in enumerate(items):
        st, recv = _quantities(item)
        if recv < 0:
            errors[item_key(item, idx)] = "Quantity must be >= 0"
            continue
        if recv > st:
            errors[item_key(item, idx)] = f"Cannot exceed ST quantity ({st:g})"
            continue
        if recv > 0:
            any_received = True
        if recv < st:
            all_full = False
    if errors:
        raise QuantityValidationError("Received quantities are out of range.", errors)

    if not items:
        return DELIVERY_PENDING
    if all_full:
        return DELIVERY_TRANSFERRED
    if any_received:
        return DELIVERY_PARTIAL
    return DELIVERY_PENDING


def is_grn(delivery: Any) -> bool:
    """True when the delivery's items derive to Transferred. Invalid items never count."""
    try:
        return derive_status(field(delivery, "items", None) or []) == DELIVERY_TRANSFERRED
    except QuantityValidationError:
        return False


def display_status(delivery: Any) -> str:
    """Status shown in lists; falls back to the stored value when items are inconsistent."""
    try:
        return derive_status(field(delivery, "items", None) or [])
    except QuantityValidationError:
        return label(field(delivery, "status", DELIVERY_PENDING) or DELIVERY_PENDING)


# ---------- Checklist summary ----------

def summarize(items: Sequence[Any]) -> Dict[str, float]:
    """Totals for the checklist footer: submitted (ST qty), received and missing."""
    submitted = received = 0.0
    for item in items:
        st, recv = _quantities(item)
        submitted += st
        received += recv
    return {"submitted": submitted, "received": received, "missing": max(0.0, submitted - received)}


def all_transferred(items: Sequence[Any]) -> bool:
    """Every item ticked and fully received; drives the 'All items transferred' banner."""
    if not items:
        return False
    for item in items:
        st, recv = _quantities(item)
        if not field(item, "is_received", False) or recv < st:
            return False
    return True
