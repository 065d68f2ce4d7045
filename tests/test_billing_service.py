# tests/test_billing_service.py
from dataclasses import replace

import pytest

from material_ops.api.upcoming_deliveries_api import Billing, BillingLine
from material_ops.constants import DEFAULT_COMPANY_NAME
from material_ops.modules.delivery_utilities.errors import BillingNotAllowed, BillingValidationError
from material_ops.modules.grn import SAVE_TOPICS, GrnBillingService

from conftest import FakeDeliveriesApi, make_delivery, make_item


@pytest.fixture()
def grn():
    return make_delivery(
        items=[make_item("a", st=10, received=10, category="Cement"), make_item("b", st=2, received=2, category="Sand")],
        transfer_number="PO20251223-LNBNE-01",
        type="PO",
    )


@pytest.fixture()
def api(grn):
    return FakeDeliveriesApi(grn)


@pytest.fixture()
def service(api, bus, events):
    return GrnBillingService(api, bus, event_logger=events)


def _priced(billing, *prices):
    return replace(billing, lines=[replace(ln, price=p) for ln, p in zip(billing.lines, prices)])


def test_draft_seeds_one_line_per_item(service, grn):
    draft = service.draft(grn)
    assert [ln.material_id for ln in draft.lines] == ["a", "b"]
    assert draft.invoice_number == "PO20251223-LNBNE"
    assert draft.company_name == DEFAULT_COMPANY_NAME


def test_draft_keeps_existing_prices(service, grn):
    grn.billing = Billing(invoice_number="INV-9", lines=[BillingLine("b", "Sand", price=300, discount=10)])
    draft = service.draft(grn)
    assert draft.invoice_number == "INV-9"
    assert [(ln.material_id, ln.price, ln.discount) for ln in draft.lines] == [("a", 0.0, 0.0), ("b", 300, 10)]


def test_preview_header_billing(service):
    totals = service.preview(Billing(price=500, discount=10, discount_type="percentage"))
    assert (totals.total_price, totals.total_discount, totals.final_amount) == pytest.approx((500, 50, 450))


def test_validate_requires_positive_price_per_line(service, grn):
    errors = service.validate(_priced(service.draft(grn), 100, 0))
    assert list(errors) == ["1.price"]


def test_validate_header_billing(service):
    assert "price" in service.validate(Billing(price=0))
    assert service.validate(Billing(price=10)) == {}


def test_save_sends_computed_amounts_and_publishes(service, api, grn, bus):
    seen = []
    bus.published.connect(lambda topic, ts: seen.append(topic))
    billing = service.draft(grn)
    billing = replace(billing, lines=[
        replace(billing.lines[0], price=1000, discount=10, discount_type="percentage"),
        replace(billing.lines[1], price=50, discount=80),
    ])

    saved = service.save(grn, billing)

    op, delivery_id, sent = api.calls[-1]
    assert (op, delivery_id) == ("update_billing", "d1")
    assert [ln.amount for ln in sent.lines] == pytest.approx([900, 0])
    assert sent.final_amount == pytest.approx(900)
    assert sent.total_discount == pytest.approx(180)
    assert sent.bill_date
    assert saved.billing.final_amount == pytest.approx(900)
    assert sorted(seen) == sorted(SAVE_TOPICS)


def test_save_fills_blank_invoice_and_company(service, api, grn):
    billing = replace(_priced(service.draft(grn), 10, 10), invoice_number="  ", company_name="")
    service.save(grn, billing)
    sent = api.calls[-1][2]
    assert sent.invoice_number == "PO20251223-LNBNE"
    assert sent.company_name == DEFAULT_COMPANY_NAME


def test_save_rejects_non_transferred(service, api):
    d = make_delivery("p1", items=[make_item(st=10, received=4)])
    api.store[d.id] = d
    with pytest.raises(BillingNotAllowed):
        service.save(d, Billing(price=10))
    assert api.calls == []


def test_save_rejects_invalid_values(service, api, grn):
    billing = _priced(service.draft(grn), 100, 100)
    billing.lines[0].discount = 150
    billing.lines[0].discount_type = "percentage"
    with pytest.raises(BillingValidationError) as ei:
        service.save(grn, billing)
    assert "0.discount" in ei.value.errors
    assert api.calls == []


def test_save_recomputes_header_amount_over_stored_value(service, api, grn):
    billing = replace(_priced(service.draft(grn), 100, 20), amount=9999.0, final_amount=9999.0)

    service.save(grn, billing)

    sent = api.calls[-1][2]
    assert sent.amount == pytest.approx(120)
    assert sent.final_amount == pytest.approx(120)
