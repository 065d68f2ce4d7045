"""Client-side validation and workflow errors. Nothing here is sent to the server."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional


class ValidationError(ValueError):
    """Base class; `errors` maps a field or item key to a human message."""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors: Dict[str, str] = dict(errors or {})


class QuantityValidationError(ValidationError):
    """One or more received quantities are outside 0..st_quantity."""


class BillingValidationError(ValidationError):
    """Price / discount / discount type rejected before computing an amount."""


class StatusTransitionError(ValidationError):
    def __init__(self, current: str, new: str) -> None:
        super().__init__(f"Cannot change status from '{current}' to '{new}'.")
        self.current = current
        self.new = new


class FormValidationError(ValidationError):
    """Create form incomplete; `problems` lists every issue in display order."""

    def __init__(self, problems: Iterable[str]) -> None:
        self.problems: List[str] = list(problems)
        super().__init__("\n".join(self.problems) or "Form is incomplete.")


class ConfirmationRequired(Exception):
    """Items marked received below their ST quantity need an explicit resolution."""

    def __init__(self, item_ids: Iterable[str]) -> None:
        self.item_ids: List[str] = list(item_ids)
        super().__init__(f"{len(self.item_ids)} item(s) need confirmation before saving.")


class BillingNotAllowed(Exception):
    """Billing can only be attached to a fully transferred delivery."""

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Billing can only be edited once the delivery is Transferred (currently {status}).")
