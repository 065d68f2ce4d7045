"""
delivery_utilities/calculations.py

Pure helpers for GRN billing previews. The backend recomputes and persists the
authoritative amount; these only drive the dialog's live totals and the
pre-save validation.

Do not import API classes or Qt here.
Only compute numbers; formatting belongs in the UI.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional

from ...constants import DISCOUNT_FLAT, DISCOUNT_PERCENTAGE, DISCOUNT_TYPES
from ...utils.helpers import field
from ...utils.validators import try_parse_float
from .errors import BillingValidationError

__all__ = [
    "clamp_non_negative",
    "validate_billing_inputs",
    "calc_amount",
    "effective_discount",
    "BillingTotals",
    "billing_totals",
    "derive_invoice_number",
]

_TRAILING_SUFFIX = re.compile(r"-\d+$")


# -----------------------------
# Core utilities
# -----------------------------

def clamp_non_negative(x: float) -> float:
    """Return x if x > 0, else 0.0. Bill amounts never go below zero."""
    return x if x > 0.0 else 0.0


def validate_billing_inputs(price: Any, discount: Any, discount_type: Any) -> tuple[float, float, str]:
    """
    Parse and check the three billing inputs; returns (price, discount, discount_type).

    Raises BillingValidationError listing every problem found:
      - price / discount not numbers, or negative
      - discount_type not 'flat' or 'percentage'
      - percentage discount above 100
    """
    errors: Dict[str, str] = {}
    ok_p, p = try_parse_float(price)
    ok_d, d = try_parse_float(discount)
    kind = str(discount_type or "").strip().lower()

    if not ok_p:
        errors["price"] = "Price must be a number."
    elif p < 0:
        errors["price"] = "Price cannot be negative."
    if not ok_d:
        errors["discount"] = "Discount must be a number."
    elif d < 0:
        errors["discount"] = "Discount cannot be negative."
    if kind not in DISCOUNT_TYPES:
        errors["discount_type"] = "Discount type must be 'flat' or 'percentage'."
    elif kind == DISCOUNT_PERCENTAGE and ok_d and d is not None and d > 100:
        errors["discount"] = "Percentage discount cannot exceed 100."

    if errors:
        raise BillingValidationError("Invalid billing values.", errors)
    return float(p), float(d), kind  # type: ignore[arg-type]


def effective_discount(price: Any, discount: Any, discount_type: Any) -> float:
    """Discount in currency units: flat as-is, percentage of price."""
    p, d, kind = validate_billing_inputs(price, discount, discount_type)
    if kind == DISCOUNT_PERCENTAGE:
        return p * d / 100.0
    return d


def calc_amount(price: Any, discount: Any, discount_type: Any = DISCOUNT_FLAT) -> float:
    """
    flat:       max(0, price - discount)
    percentage: max(0, price - price * discount / 100)

    Inputs are validated first; invalid values raise BillingValidationError.
    """
    p, _, _ = validate_billing_inputs(price, discount, discount_type)
    return clamp_non_negative(p - effective_discount(price, discount, discount_type))


# -----------------------------
# Roll-ups
# -----------------------------

@dataclass(frozen=True)
class BillingTotals:
    total_price: float
    total_discount: float
    final_amount: float


def billing_totals(lines: Iterable[Any]) -> BillingTotals:
    """
    Sum material-wise billing lines.

    total_price    = sum of line prices
    total_discount = sum of effective line discounts
    final_amount   = sum of clamped line amounts

    Every line is validated; the first invalid line raises with its index in the keys.
    """
    total_price = total_discount = final_amount = 0.0
    for idx, line in enumerate(lines):
        price = field(line, "price", 0)
        discount = field(line, "discount", 0)
        kind = field(line, "discount_type", None) or field(line, "discountType", DISCOUNT_FLAT)
        try:
            p, _, _ = validate_billing_inputs(price, discount, kind)
        except BillingValidationError as exc:
            raise BillingValidationError(
                exc.message, {f"{idx}.{k}": v for k, v in exc.errors.items()}
            ) from None
        total_price += p
        total_discount += effective_discount(price, discount, kind)
        final_amount += calc_amount(price, discount, kind)
    return BillingTotals(total_price, total_discount, final_amount)


# -----------------------------
# Invoice number
# -----------------------------

def derive_invoice_number(origin_id: Optional[str]) -> str:
    """
    Strip one trailing '-<digits>' suffix from a PO / transfer id.

    'PO20251223-LNBNE-01' -> 'PO20251223-LNBNE'
    'PO20251223-LNBNE'    -> 'PO20251223-LNBNE'
    None / ''             -> ''
    """
    if not origin_id:
        return ""
    return _TRAILING_SUFFIX.sub("", str(origin_id).strip())
