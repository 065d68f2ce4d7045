# tests/test_reconciliation.py
import pytest

from material_ops.api import ApiResponseError
from material_ops.modules.delivery import DeliveryReconciler
from material_ops.modules.delivery_utilities.errors import ConfirmationRequired, QuantityValidationError
from material_ops.modules.delivery_utilities.validation import Resolution

from conftest import FakeDeliveriesApi, FakeRecordsApi, make_delivery, make_item


@pytest.fixture()
def delivery():
    return make_delivery(items=[make_item("a", st=10), make_item("b", st=5)])


@pytest.fixture()
def api(delivery):
    return FakeDeliveriesApi(delivery)


@pytest.fixture()
def transfers(site_transfer):
    return FakeRecordsApi([site_transfer])


@pytest.fixture()
def reconciler(api, bus, transfers, events):
    return DeliveryReconciler(api, bus, purchase_orders_api=FakeRecordsApi(), site_transfers_api=transfers,
                              event_logger=events)


def _published(bus):
    seen = []
    bus.published.connect(lambda topic, ts: seen.append(topic))
    return seen


# ---------- prepare ----------

def test_prepare_reports_every_bad_item(reconciler, delivery, api):
    with pytest.raises(QuantityValidationError) as ei:
        reconciler.prepare(delivery, {"a": {"received_quantity": 11}, "b": {"received_quantity": -1}})
    assert set(ei.value.errors) == {"a", "b"}
    assert api.calls == []


def test_prepare_rejects_unknown_items(reconciler, delivery):
    with pytest.raises(QuantityValidationError):
        reconciler.prepare(delivery, {"zzz": {"received_quantity": 1}})


def test_prepare_flags_short_ticked_items(reconciler, delivery):
    prepared = reconciler.prepare(delivery, {"a": {"received_quantity": 7, "is_received": True}})
    assert [i.item_id for i in prepared.conflicts] == ["a"]
    assert prepared.items[0].received_quantity == 7


# ---------- submit ----------

def test_unresolved_conflict_sends_nothing(reconciler, delivery, api):
    with pytest.raises(ConfirmationRequired) as ei:
        reconciler.submit(delivery, {"a": {"received_quantity": 7, "is_received": True}})
    assert ei.value.item_ids == ["a"]
    assert api.calls == []


def test_partial_receipt_updates_status_and_publishes(reconciler, delivery, api, transfers, bus):
    seen = _published(bus)
    result = reconciler.submit(delivery, {"a": {"received_quantity": 4}})

    assert api.calls[0][0] == "update_items"
    assert ("update_status", "d1", "Partial") in api.calls
    assert result.status == "Partial"
    assert result.previous_status == "Pending"
    assert result.status_changed
    assert result.origin_updated is False
    assert transfers.status_calls == []
    assert sorted(seen) == ["deliveryRefresh", "siteTransferRefresh", "upcomingDeliveryRefresh"]
    assert result.published_topics == sorted(seen)


def test_full_receipt_closes_site_transfer(reconciler, delivery, transfers):
    result = reconciler.submit(delivery, {
        "a": {"received_quantity": 10, "is_received": True},
        "b": {"received_quantity": 5, "is_received": True},
    })
    assert result.status == "Transferred"
    assert result.origin_updated is True
    assert transfers.status_calls == [("st-db-1", "transferred")]


def test_auto_fill_resolution_completes_delivery(reconciler, delivery, api):
    result = reconciler.submit(
        delivery,
        {"a": {"received_quantity": 3, "is_received": True}, "b": {"received_quantity": 5, "is_received": True}},
        {"a": Resolution.AUTO_FILL},
    )
    sent = api.calls[0][2]
    assert [(i.item_id, i.received_quantity, i.is_received) for i in sent] == [("a", 10, True), ("b", 5, True)]
    assert result.status == "Transferred"


def test_keep_quantity_resolution_stays_partial(reconciler, delivery, api):
    result = reconciler.submit(
        delivery, {"a": {"received_quantity": 3, "is_received": True}}, {"a": Resolution.KEEP_QUANTITY},
    )
    assert api.calls[0][2][0].received_quantity == 3
    assert result.status == "Partial"


def test_status_comes_from_persisted_items(reconciler, delivery, api):
    # server clamps or rewrites quantities; its answer wins
    api.server_items = [make_item("a", st=10, received=10), make_item("b", st=5, received=5)]
    result = reconciler.submit(delivery, {"a": {"received_quantity": 1}})
    assert result.status == "Transferred"


def test_no_status_write_when_unchanged(reconciler, api):
    d = make_delivery(items=[make_item("a", st=10, received=2)], status="Partial")
    api.store[d.id] = d
    reconciler.submit(d, {"a": {"received_quantity": 3}})
    assert [c[0] for c in api.calls] == ["update_items"]


def test_failed_update_publishes_nothing(reconciler, delivery, api, bus):
    seen = _published(bus)
    api.fail_on.add("update_items")
    with pytest.raises(ApiResponseError):
        reconciler.submit(delivery, {"a": {"received_quantity": 4}})
    assert seen == []


def test_origin_failure_is_a_warning(reconciler, delivery, transfers):
    transfers.fail_update = True
    result = reconciler.submit(delivery, {"a": {"received_quantity": 10}, "b": {"received_quantity": 5}})
    assert result.status == "Transferred"
    assert result.origin_updated is False
    assert any("ST20261019-ABC-01" in w for w in result.warnings)


def test_already_transferred_origin_is_left_alone(reconciler, delivery, transfers, site_transfer):
    site_transfer.status = "transferred"
    result = reconciler.submit(delivery, {"a": {"received_quantity": 10}, "b": {"received_quantity": 5}})
    assert result.origin_updated is False
    assert transfers.status_calls == []


def test_unknown_type_publishes_everything_and_skips_origin(api, bus, transfers, events):
    d = make_delivery("d9", type=None, items=[make_item("a", st=1)])
    api.store[d.id] = d
    rec = DeliveryReconciler(api, bus, site_transfers_api=transfers, event_logger=events)
    result = rec.submit(d, {"a": {"received_quantity": 1}})
    assert result.status == "Transferred"
    assert len(result.published_topics) == 4
    assert transfers.status_calls == []
