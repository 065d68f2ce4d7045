# tests/test_grn.py
from datetime import date

import pytest

from material_ops.api.upcoming_deliveries_api import Billing, BillingLine
from material_ops.modules.delivery_utilities.grn import (
    GrnFilters,
    apply_filters,
    grn_analytics,
    grn_projection,
    site_options,
)
from material_ops.modules.delivery_utilities.origin import origin_of, topics_for_delivery

from conftest import make_delivery, make_item


@pytest.fixture()
def grns():
    billed = make_delivery(
        "d1",
        items=[make_item("a", st=10, received=10, category="Cement"), make_item("b", st=4, received=4, category="Sand")],
        type="PO", transfer_number="PO20261001-AAA-01", from_site="Acme Traders", to_site="Tower B",
        created_at="2026-10-01T10:00:00Z",
        billing=Billing(
            invoice_number="INV-100",
            lines=[
                BillingLine("a", "Cement", price=1000, discount=100, amount=900),
                BillingLine("b", "Sand", price=200, amount=200),
            ],
            final_amount=1100,
        ),
    )
    header_billed = make_delivery(
        "d2",
        items=[make_item("c", st=2, received=2, category="Steel"), make_item("d", st=2, received=2, category="Sand")],
        type="ST", transfer_number="ST20261005-BBB-01", from_site="Main Yard", to_site="Tower A",
        created_at="2026-10-05T10:00:00Z",
        billing=Billing(invoice_number="INV-200", final_amount=400),
    )
    unbilled = make_delivery(
        "d3",
        items=[make_item("e", st=1, received=1, category="Bricks")],
        type="ST", transfer_number="ST20261010-CCC-01", from_site="Main Yard", to_site="Tower B",
        created_at="2026-10-10T10:00:00Z",
    )
    return [billed, header_billed, unbilled]


def test_projection_keeps_only_fully_received(grns):
    partial = make_delivery("p", items=[make_item(st=5, received=2)], status="Transferred")
    invalid = make_delivery("x", items=[make_item(st=5, received=8)])
    assert [d.id for d in grn_projection([partial, *grns, invalid])] == ["d1", "d2", "d3"]


# ---------- filters ----------

def test_no_filters_is_inactive(grns):
    assert GrnFilters().active is False
    assert apply_filters(grns, GrnFilters()) == grns


def test_search_matches_reference_site_and_invoice(grns):
    assert [d.id for d in apply_filters(grns, GrnFilters(search="acme"))] == ["d1"]
    assert [d.id for d in apply_filters(grns, GrnFilters(search="inv-200"))] == ["d2"]
    assert [d.id for d in apply_filters(grns, GrnFilters(search="CCC"))] == ["d3"]


def test_site_filter_matches_either_end(grns):
    assert [d.id for d in apply_filters(grns, GrnFilters(site="main yard"))] == ["d2", "d3"]
    assert [d.id for d in apply_filters(grns, GrnFilters(site="Tower B"))] == ["d1", "d3"]


def test_origin_and_invoice_filters(grns):
    assert [d.id for d in apply_filters(grns, GrnFilters(origin_kind="PO"))] == ["d1"]
    assert [d.id for d in apply_filters(grns, GrnFilters(origin_kind="ST", invoice_number="200"))] == ["d2"]


def test_date_range_is_inclusive(grns):
    f = GrnFilters(date_from=date(2026, 10, 5), date_to=date(2026, 10, 10))
    assert f.active
    assert [d.id for d in apply_filters(grns, f)] == ["d2", "d3"]


def test_site_options_are_distinct_and_sorted(grns):
    assert site_options(grns) == ["Acme Traders", "Main Yard", "Tower A", "Tower B"]


# ---------- analytics ----------

def test_headline_totals(grns):
    a = grn_analytics(grns)
    assert a.total_grns == 3
    assert a.total_invoices == 2
    assert a.total_spend == pytest.approx(1500)
    assert a.total_materials == 5


def test_invoice_summary_sorted_by_amount(grns):
    a = grn_analytics(grns)
    assert [i.invoice_number for i in a.invoice_summary] == ["INV-100", "INV-200", "ST20261010-CCC-01"]
    assert a.invoice_summary[0].grns == ["PO20261001-AAA-01"]


def test_site_summary_groups_by_destination(grns):
    a = grn_analytics(grns)
    by_site = {s.site_name: s for s in a.site_summary}
    assert by_site["Tower B"].grn_count == 2
    assert by_site["Tower B"].invoice_count == 1
    assert by_site["Tower B"].total_amount == pytest.approx(1100)
    assert a.site_summary[0].site_name == "Tower B"


def test_material_summary_uses_lines_or_even_share(grns):
    a = grn_analytics(grns)
    by_name = {m.material_name: m for m in a.material_summary}
    assert by_name["Cement"].total_cost == pytest.approx(900)
    assert by_name["Cement"].total_discount == pytest.approx(100)
    # Sand: 200 from the d1 line plus half of d2's 400 header amount
    assert by_name["Sand"].total_cost == pytest.approx(400)
    assert by_name["Sand"].total_quantity == pytest.approx(6)
    assert by_name["Sand"].grn_count == 2
    assert by_name["Bricks"].total_cost == 0


def test_empty_analytics():
    a = grn_analytics([])
    assert (a.total_grns, a.total_spend, a.invoice_summary) == (0, 0.0, [])


# ---------- origin ----------

def test_origin_uses_explicit_type_only():
    assert origin_of(make_delivery(type="po")).kind == "PO"
    assert origin_of(make_delivery(type=None, transfer_number="PO123")).kind is None


def test_topics_fan_out_by_origin():
    assert topics_for_delivery("PO") == {"upcomingDeliveryRefresh", "deliveryRefresh", "intentRefresh"}
    assert topics_for_delivery("ST") == {"upcomingDeliveryRefresh", "deliveryRefresh", "siteTransferRefresh"}
    assert len(topics_for_delivery(None)) == 4
