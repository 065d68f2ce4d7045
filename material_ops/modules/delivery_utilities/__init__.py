"""
Pure delivery / GRN logic shared by every view: status derivation, billing
math, received-quantity validation, origin correlation and GRN roll-ups.
No Qt and no network access in this package.
"""
from .errors import (
    BillingNotAllowed,
    BillingValidationError,
    ConfirmationRequired,
    FormValidationError,
    QuantityValidationError,
    StatusTransitionError,
    ValidationError,
)
from .status import derive_status, is_grn, summarize, all_transferred
from .calculations import billing_totals, calc_amount, derive_invoice_number
from .origin import Origin, origin_of, topics_for_delivery
from .transitions import can_transition, ensure_transition
from .validation import Resolution, apply_resolution, find_conflicts, validate_received

__all__ = [
    "BillingNotAllowed",
    "BillingValidationError",
    "ConfirmationRequired",
    "FormValidationError",
    "QuantityValidationError",
    "StatusTransitionError",
    "ValidationError",
    "derive_status",
    "is_grn",
    "summarize",
    "all_transferred",
    "billing_totals",
    "calc_amount",
    "derive_invoice_number",
    "Origin",
    "origin_of",
    "topics_for_delivery",
    "can_transition",
    "ensure_transition",
    "Resolution",
    "apply_resolution",
    "find_conflicts",
    "validate_received",
]
