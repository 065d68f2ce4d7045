"""
modules/grn/billing_service.py

Attach or edit billing on a GRN (a fully transferred delivery).

- draft():   billing to seed the dialog with (existing billing, else one line per item)
- preview(): advisory totals while the operator types
- save():    validate, fill defaults, send update_billing, publish refresh topics

The server recomputes and stores the authoritative amounts; the record it
returns replaces whatever the dialog computed. Last write wins.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, List

from ...api.upcoming_deliveries_api import Billing, BillingLine, UpcomingDelivery
from ...constants import (
    DEFAULT_COMPANY_NAME,
    DELIVERY_TRANSFERRED,
    DISCOUNT_FLAT,
    TOPIC_DELIVERY,
    TOPIC_UPCOMING_DELIVERY,
)
from ...utils.helpers import now_iso
from ...utils.loggers import get_event_logger, log_event
from ...utils.validators import is_strictly_positive_number
from ..delivery_utilities.calculations import (
    BillingTotals,
    billing_totals,
    calc_amount,
    derive_invoice_number,
    effective_discount,
    validate_billing_inputs,
)
from ..delivery_utilities.errors import BillingNotAllowed, BillingValidationError, QuantityValidationError
from ..delivery_utilities.status import derive_status


SAVE_TOPICS = (TOPIC_DELIVERY, TOPIC_UPCOMING_DELIVERY)


class GrnBillingService:
    def __init__(self, deliveries_api, bus, event_logger=None) -> None:
        self.deliveries = deliveries_api
        self.bus = bus
        self._events = event_logger or get_event_logger()

    # ---------- draft / preview ----------
    def draft(self, delivery: UpcomingDelivery) -> Billing:
        existing = delivery.billing or Billing()
        by_id = {ln.material_id: ln for ln in existing.lines}
        by_name = {ln.material_name: ln for ln in existing.lines}

        lines: List[BillingLine] = []
        for idx, item in enumerate(delivery.items):
            name = item.category or "Unknown Material"
            material_id = item.item_id or f"material-{idx}"
            prior = by_id.get(material_id) or by_name.get(name)
            lines.append(BillingLine(
                material_id=material_id,
                material_name=name,
                price=prior.price if prior else 0.0,
                discount=prior.discount if prior else 0.0,
                discount_type=prior.discount_type if prior else DISCOUNT_FLAT,
                amount=prior.amount if prior else 0.0,
            ))

        return replace(
            existing,
            invoice_number=existing.invoice_number or derive_invoice_number(delivery.transfer_number or delivery.st_id),
            company_name=existing.company_name or DEFAULT_COMPANY_NAME,
            lines=lines,
        )

    def preview(self, billing: Billing) -> BillingTotals:
        """Client-side totals. Header-level price/discount apply when there are no lines."""
        if billing.lines:
            return billing_totals(billing.lines)
        price, _, _ = validate_billing_inputs(billing.price, billing.discount, billing.discount_type)
        discount = effective_discount(billing.price, billing.discount, billing.discount_type)
        return BillingTotals(price, discount, calc_amount(billing.price, billing.discount, billing.discount_type))

    # ---------- save ----------
    def validate(self, billing: Billing) -> Dict[str, str]:
        """Every problem keyed '<line index>.<field>' (or 'price' etc. for header billing)."""
        errors: Dict[str, str] = {}
        if billing.lines:
            for idx, line in enumerate(billing.lines):
                try:
                    validate_billing_inputs(line.price, line.discount, line.discount_type)
                except BillingValidationError as exc:
                    errors.update({f"{idx}.{k}": v for k, v in exc.errors.items()})
                    continue
                if not is_strictly_positive_number(line.price):
                    errors[f"{idx}.price"] = "Please enter a price for this material."
        else:
            try:
                validate_billing_inputs(billing.price, billing.discount, billing.discount_type)
            except BillingValidationError as exc:
                errors.update(exc.errors)
            else:
                if not is_strictly_positive_number(billing.price):
                    errors["price"] = "Please enter a price."
        return errors

    def save(self, delivery: UpcomingDelivery, billing: Billing) -> UpcomingDelivery:
        try:
            status = derive_status(delivery.items)
        except QuantityValidationError:
            raise BillingNotAllowed(delivery.status) from None
        if status != DELIVERY_TRANSFERRED:
            raise BillingNotAllowed(status)

        errors = self.validate(billing)
        if errors:
            raise BillingValidationError("Please enter valid prices and discounts for all materials.", errors)

        totals = self.preview(billing)
        lines = [
            replace(ln, amount=calc_amount(ln.price, ln.discount, ln.discount_type))
            for ln in billing.lines
        ]
        outgoing = replace(
            billing,
            invoice_number=billing.invoice_number.strip() or derive_invoice_number(delivery.transfer_number or delivery.st_id),
            bill_date=billing.bill_date or now_iso(),
            company_name=billing.company_name.strip() or DEFAULT_COMPANY_NAME,
            lines=lines,
            amount=totals.final_amount,
            total_price=totals.total_price,
            total_discount=totals.total_discount,
            final_amount=totals.final_amount,
        )

        saved = self.deliveries.update_billing(delivery.id, outgoing)
        topics = self.bus.publish_many(SAVE_TOPICS)
        log_event(self._events, "billing", "save", "GRN billing saved", {
            "delivery_id": delivery.id,
            "invoice_number": outgoing.invoice_number,
            "final_amount": saved.billing.final_amount if saved.billing else None,
            "topics": topics,
        })
        return saved
