# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - No network: every API is a small in-memory fake defined here
# - Notification stamps and session settings live under tmp_path
# - Event logs go to a throwaway logger, never the app's data dir
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import copy
import logging
import os
import re
from dataclasses import replace

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")  # headless test runs

from PySide6 import QtCore

from material_ops.api import ApiResponseError, Page
from material_ops.api.purchase_orders_api import PurchaseOrder
from material_ops.api.site_transfers_api import SiteTransfer
from material_ops.api.upcoming_deliveries_api import DeliveryItem, UpcomingDelivery
from material_ops.modules.notifications import NotificationBus
from material_ops.utils.session import SessionContext


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
]


@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    original = QtCore.qInstallMessageHandler(None)
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        if any(r.search(text) for r in rx):
            return
        print(text)

    QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- shared plumbing ----------
@pytest.fixture()
def events():
    logger = logging.getLogger("material_ops.tests.events")
    logger.propagate = False
    return logger


@pytest.fixture()
def bus(tmp_path, qapp):
    b = NotificationBus(signal_dir=str(tmp_path / "signals"))
    yield b
    b.stop()


@pytest.fixture()
def session(tmp_path, qapp):
    return SessionContext(settings_path=str(tmp_path / "session.ini"))


# ---------- record builders ----------
def make_item(item_id="i1", st=10, received=0, is_received=False, category="Cement", **kw) -> DeliveryItem:
    return DeliveryItem(
        item_id=item_id,
        category=category,
        st_quantity=st,
        received_quantity=received,
        is_received=is_received,
        **kw,
    )


def make_delivery(delivery_id="d1", items=None, type="ST", transfer_number="ST20261019-ABC-01", **kw) -> UpcomingDelivery:
    return UpcomingDelivery(
        id=delivery_id,
        transfer_number=transfer_number,
        type=type,
        from_site=kw.pop("from_site", "Main Yard"),
        to_site=kw.pop("to_site", "Tower B"),
        created_at=kw.pop("created_at", "2026-10-19T08:30:00Z"),
        items=list(items if items is not None else [make_item()]),
        **kw,
    )


# ---------- fake APIs ----------
class FakeDeliveriesApi:
    """In-memory stand-in for UpcomingDeliveriesApi; records every mutating call."""

    def __init__(self, *deliveries):
        self.store = {d.id: copy.deepcopy(d) for d in deliveries}
        self.calls = []
        self.fail_on = set()
        self.server_items = None  # when set, get() returns these instead of the stored items

    def _check(self, op):
        if op in self.fail_on:
            raise ApiResponseError(f"{op} failed", status=500)

    def list(self, page=1, limit=20, search=""):
        self._check("list")
        items = [copy.deepcopy(d) for d in self.store.values()]
        return Page(items=items, page=page, total_pages=1, total=len(items))

    def get(self, delivery_id):
        self._check("get")
        d = copy.deepcopy(self.store[delivery_id])
        if self.server_items is not None:
            d = replace(d, items=copy.deepcopy(self.server_items))
        return d

    def update_items(self, delivery_id, items):
        self._check("update_items")
        self.calls.append(("update_items", delivery_id, [copy.deepcopy(i) for i in items]))
        self.store[delivery_id] = replace(self.store[delivery_id], items=[copy.deepcopy(i) for i in items])
        return copy.deepcopy(self.store[delivery_id])

    def update_status(self, delivery_id, status):
        self._check("update_status")
        self.calls.append(("update_status", delivery_id, status))
        self.store[delivery_id] = replace(self.store[delivery_id], status=status)
        return copy.deepcopy(self.store[delivery_id])

    def update_billing(self, delivery_id, billing):
        self._check("update_billing")
        self.calls.append(("update_billing", delivery_id, billing))
        self.store[delivery_id] = replace(self.store[delivery_id], billing=billing)
        return copy.deepcopy(self.store[delivery_id])


class FakeRecordsApi:
    """Purchase orders or site transfers: list() for the origin lookup, update_status() to close it."""

    def __init__(self, records=()):
        self.records = list(records)
        self.status_calls = []
        self.fail_update = False

    def list(self, page=1, limit=20, search=""):
        return Page(items=list(self.records), page=1, total_pages=1, total=len(self.records))

    def update_status(self, record_id, status, remarks=None):
        if self.fail_update:
            raise ApiResponseError("update failed", status=500)
        self.status_calls.append((record_id, status))
        return None


@pytest.fixture()
def site_transfer():
    return SiteTransfer(
        id="st-db-1", site_transfer_id="ST20261019-ABC", from_site="Main Yard", to_site="Tower B",
        requested_by="Ravi", status="approved",
    )


@pytest.fixture()
def purchase_order():
    return PurchaseOrder(
        id="po-db-1", purchase_order_id="PO20261019-XYZ", delivery_site="Tower B",
        requested_by="Ravi", status="approved",
    )
