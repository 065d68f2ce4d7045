"""
modules/delivery/reconciliation.py

Receiving goods against an upcoming delivery.

Flow for one submit:
  1. merge the operator's per-item edits and validate every item at once;
  2. items ticked as received below their ST quantity need an explicit
     Resolution each, otherwise ConfirmationRequired is raised;
  3. persist all items in a single update_items call;
  4. re-fetch the delivery and derive its status from the persisted items,
     writing the status back when the stored one disagrees;
  5. when the delivery is Transferred, move the originating PO / site
     transfer to 'transferred' if its lifecycle allows it;
  6. publish the refresh topics for the delivery's origin.

Nothing is sent when validation or confirmation fails, and nothing is
published when step 3 fails. Steps 4 and 5 are best effort: their failures
are logged and reported as warnings.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

from ...api.errors import ApiError
from ...api.upcoming_deliveries_api import DeliveryItem, UpcomingDelivery
from ...constants import DELIVERY_TRANSFERRED, ORIGIN_PO, RECORD_TRANSFERRED
from ...utils.loggers import get_event_logger, get_logger, log_event
from ...utils.validators import try_parse_quantity
from ..delivery_utilities.calculations import derive_invoice_number
from ..delivery_utilities.errors import ConfirmationRequired, QuantityValidationError
from ..delivery_utilities.origin import Origin, origin_of, topics_for_delivery
from ..delivery_utilities.status import derive_status, display_status
from ..delivery_utilities.transitions import can_transition
from ..delivery_utilities.validation import Resolution, apply_resolution, find_conflicts, validate_received

_log = get_logger(__name__)

ItemEdits = Mapping[str, Mapping[str, Any]]


@dataclass
class PreparedItems:
    items: List[DeliveryItem]
    conflicts: List[DeliveryItem]


@dataclass
class ReconcileResult:
    delivery: UpcomingDelivery
    status: str
    previous_status: str
    published_topics: List[str] = field(default_factory=list)
    origin_updated: bool = False
    warnings: List[str] = field(default_factory=list)

    @property
    def status_changed(self) -> bool:
        return self.status != self.previous_status


class DeliveryReconciler:
    def __init__(
        self,
        deliveries_api,
        bus,
        purchase_orders_api=None,
        site_transfers_api=None,
        event_logger=None,
    ) -> None:
        self.deliveries = deliveries_api
        self.bus = bus
        self.purchase_orders = purchase_orders_api
        self.site_transfers = site_transfers_api
        self._events = event_logger or get_event_logger()

    # ---------- step 1-2 ----------
    def prepare(self, delivery: UpcomingDelivery, edits: Optional[ItemEdits] = None) -> PreparedItems:
        """
        Merge `edits` ({item_id: {received_quantity, is_received}}) into copies of the
        delivery's items and validate them all. Raises QuantityValidationError with
        every violation; returns the merged items and the checkbox conflicts.
        """
        edits = dict(edits or {})
        known = {it.item_id for it in delivery.items}
        unknown = [k for k in edits if k not in known]
        if unknown:
            raise QuantityValidationError(
                "Edits refer to items not on this delivery.",
                {k: "Unknown item" for k in unknown},
            )

        merged: List[Any] = []
        for item in delivery.items:
            change = edits.get(item.item_id) or {}
            merged.append(replace(
                item,
                received_quantity=change.get("received_quantity", item.received_quantity),
                is_received=bool(change.get("is_received", item.is_received)),
            ))

        errors = validate_received(merged)
        if errors:
            log_event(self._events, "reconcile", "validate", "Rejected received quantities",
                      {"delivery_id": delivery.id, "errors": errors})
            raise QuantityValidationError("Please fix the highlighted quantities.", errors)

        items = [replace(it, received_quantity=try_parse_quantity(it.received_quantity)[1]) for it in merged]
        return PreparedItems(items=items, conflicts=find_conflicts(items))

    # ---------- full flow ----------
    def submit(
        self,
        delivery: UpcomingDelivery,
        edits: Optional[ItemEdits] = None,
        resolutions: Optional[Mapping[str, Resolution]] = None,
    ) -> ReconcileResult:
        prepared = self.prepare(delivery, edits)
        resolutions = dict(resolutions or {})

        unresolved = [it.item_id for it in prepared.conflicts if it.item_id not in resolutions]
        if unresolved:
            raise ConfirmationRequired(unresolved)
        conflict_ids = {it.item_id for it in prepared.conflicts}
        items = [
            apply_resolution(it, resolutions[it.item_id]) if it.item_id in conflict_ids else it
            for it in prepared.items
        ]

        previous = display_status(delivery)
        origin = origin_of(delivery)
        warnings: List[str] = []

        # one request for every item; on failure nothing below runs
        try:
            updated = self.deliveries.update_items(delivery.id, items)
        except ApiError as exc:
            log_event(self._events, "reconcile", "persist", "update_items failed",
                      {"delivery_id": delivery.id, "error": exc.message}, level=logging.ERROR)
            raise

        persisted = self._refetch(delivery.id, updated, warnings)
        status = self._sync_status(persisted, warnings)
        if status != persisted.status:
            persisted = replace(persisted, status=status)

        origin_updated = False
        if status == DELIVERY_TRANSFERRED:
            origin_updated = self._close_origin(origin, warnings)

        topics = self.bus.publish_many(topics_for_delivery(origin.kind))
        log_event(self._events, "reconcile", "notify", "Delivery reconciled", {
            "delivery_id": delivery.id,
            "origin": origin.kind or "unknown",
            "previous_status": previous,
            "status": status,
            "topics": topics,
            "origin_updated": origin_updated,
            "warnings": warnings,
        })
        return ReconcileResult(
            delivery=persisted,
            status=status,
            previous_status=previous,
            published_topics=topics,
            origin_updated=origin_updated,
            warnings=warnings,
        )

    # ---------- helpers ----------
    def _refetch(self, delivery_id: str, fallback: UpcomingDelivery, warnings: List[str]) -> UpcomingDelivery:
        try:
            return self.deliveries.get(delivery_id)
        except ApiError as exc:
            _log.warning("Re-fetch of delivery %s failed: %s", delivery_id, exc)
            warnings.append(f"Could not reload the delivery: {exc.message}")
            return fallback

    def _sync_status(self, persisted: UpcomingDelivery, warnings: List[str]) -> str:
        try:
            status = derive_status(persisted.items)
        except QuantityValidationError as exc:
            _log.warning("Server returned inconsistent quantities for %s: %s", persisted.id, exc.errors)
            warnings.append("Server quantities are inconsistent; status left unchanged.")
            return persisted.status
        if status != persisted.status:
            try:
                self.deliveries.update_status(persisted.id, status)
            except ApiError as exc:
                _log.warning("Status write-back for %s failed: %s", persisted.id, exc)
                warnings.append(f"Could not save status {status}: {exc.message}")
        return status

    def _close_origin(self, origin: Origin, warnings: List[str]) -> bool:
        if not origin.known or not origin.origin_id:
            return False
        api = self.purchase_orders if origin.kind == ORIGIN_PO else self.site_transfers
        if api is None:
            return False
        try:
            record = self._find_origin(api, origin)
            if record is None:
                warnings.append(f"Origin {origin.kind} {origin.origin_id} not found.")
                return False
            if record.status == RECORD_TRANSFERRED or not can_transition(record.status, RECORD_TRANSFERRED):
                return False
            api.update_status(record.id, RECORD_TRANSFERRED)
        except ApiError as exc:
            _log.warning("Could not update origin %s %s: %s", origin.kind, origin.origin_id, exc)
            warnings.append(f"Could not mark {origin.kind} {origin.origin_id} as transferred: {exc.message}")
            return False
        return True

    @staticmethod
    def _find_origin(api, origin: Origin):
        wanted = {origin.origin_id, derive_invoice_number(origin.origin_id)}
        page = api.list(page=1, limit=50, search=derive_invoice_number(origin.origin_id))
        for rec in page.items:
            human_id = rec.purchase_order_id if origin.kind == ORIGIN_PO else rec.site_transfer_id
            if human_id in wanted or rec.id in wanted:
                return rec
        return None


__all__ = ["DeliveryReconciler", "ReconcileResult", "PreparedItems"]
