"""
delivery_utilities/validation.py

Checklist and create-form validation. Every function here collects all
problems instead of stopping at the first one, so the operator can fix them
in a single pass.
"""
from __future__ import annotations

import enum
from dataclasses import replace
from typing import Any, Dict, List, Sequence

from ...utils.helpers import field
from ...utils.validators import non_empty, same_text, try_parse_quantity

MSG_NEGATIVE = "Quantity must be >= 0"
MSG_NOT_A_NUMBER = "Quantity must be a whole number"


def msg_exceeds(st_quantity: float) -> str:
    return f"Cannot exceed ST quantity ({st_quantity:g})"


def item_key(item: Any, index: int = 0) -> str:
    return str(field(item, "item_id") or field(item, "itemId") or field(item, "_id") or index)


def validate_quantity(value: Any, st_quantity: float) -> str | None:
    """Message for one proposed received quantity, or None when it is acceptable."""
    ok, qty = try_parse_quantity(value)
    if not ok:
        return MSG_NOT_A_NUMBER
    if qty < 0:
        return MSG_NEGATIVE
    if qty > float(st_quantity or 0):
        return msg_exceeds(float(st_quantity or 0))
    return None


def validate_received(items: Sequence[Any]) -> Dict[str, str]:
    """{item key: message} for every item whose received quantity is out of range."""
    errors: Dict[str, str] = {}
    for idx, item in enumerate(items):
        msg = validate_quantity(field(item, "received_quantity", 0), field(item, "st_quantity", 0))
        if msg:
            errors[item_key(item, idx)] = msg
    return errors


# ---------- checkbox vs quantity ----------

class Resolution(enum.Enum):
    AUTO_FILL = "auto_fill"          # received_quantity := st_quantity
    KEEP_QUANTITY = "keep_quantity"  # keep the lesser quantity, still marked received


def is_conflict(item: Any) -> bool:
    st = float(field(item, "st_quantity", 0) or 0)
    ok, recv = try_parse_quantity(field(item, "received_quantity", 0))
    return bool(field(item, "is_received", False)) and ok and recv < st


def find_conflicts(items: Sequence[Any]) -> List[Any]:
    """Items ticked as received while their quantity is below the ST quantity."""
    return [item for item in items if is_conflict(item)]


def apply_resolution(item: Any, resolution: Resolution):
    """Return a new item with the operator's choice applied; the input is not modified."""
    if resolution is Resolution.AUTO_FILL:
        return replace(item, received_quantity=item.st_quantity, is_received=True)
    if resolution is Resolution.KEEP_QUANTITY:
        return replace(item, is_received=True)
    raise ValueError(f"Unknown resolution: {resolution!r}")


# ---------- create forms ----------

def validate_material_lines(materials: Sequence[Any], *, require_full_category: bool = False) -> List[str]:
    problems: List[str] = []
    if not materials:
        return ["Please add at least one material."]
    for n, m in enumerate(materials, start=1):
        missing = []
        if not non_empty(field(m, "category")):
            missing.append("category")
        if require_full_category:
            if not non_empty(field(m, "sub_category")):
                missing.append("sub category")
            if not non_empty(field(m, "sub_category1")):
                missing.append("sub category 1")
        ok, qty = try_parse_quantity(field(m, "quantity"))
        if not ok or qty <= 0:
            missing.append("quantity")
        if missing:
            problems.append(f"Material {n}: missing {', '.join(missing)}.")
    return problems


def validate_intent_form(delivery_site: str, requested_by: str, materials: Sequence[Any]) -> List[str]:
    problems: List[str] = []
    if not non_empty(requested_by):
        problems.append("Requested by is required.")
    if not non_empty(delivery_site):
        problems.append("Delivery site is required.")
    problems.extend(validate_material_lines(materials))
    return problems


def validate_site_transfer_form(
    from_site: str, to_site: str, requested_by: str, materials: Sequence[Any]
) -> List[str]:
    problems: List[str] = []
    if not non_empty(from_site):
        problems.append("Please enter From Site.")
    if not non_empty(to_site):
        problems.append("Please select Transfer To site.")
    if non_empty(from_site) and non_empty(to_site) and same_text(from_site, to_site):
        problems.append("From and To sites must be different.")
    if not non_empty(requested_by):
        problems.append("Please select Checked By.")
    problems.extend(validate_material_lines(materials, require_full_category=True))
    return problems
