# tests/test_status.py
import itertools
import random

import pytest

from material_ops.modules.delivery_utilities.errors import QuantityValidationError
from material_ops.modules.delivery_utilities.status import (
    all_transferred,
    derive_status,
    display_status,
    is_grn,
    label,
    normalize,
    sort_key,
    style_tokens,
    summarize,
)

from conftest import make_delivery, make_item


def _items(*pairs):
    return [{"item_id": f"i{n}", "st_quantity": st, "received_quantity": rq} for n, (st, rq) in enumerate(pairs)]


# ---------- derive_status ----------

def test_empty_list_is_pending():
    assert derive_status([]) == "Pending"


def test_nothing_received_is_pending():
    assert derive_status(_items((10, 0), (5, 0))) == "Pending"


def test_some_received_is_partial():
    assert derive_status(_items((10, 4), (5, 0))) == "Partial"


def test_everything_received_is_transferred():
    assert derive_status(_items((10, 10), (5, 5))) == "Transferred"


def test_zero_quantity_items_count_as_full():
    assert derive_status(_items((0, 0))) == "Transferred"


def test_out_of_range_items_are_all_reported():
    with pytest.raises(QuantityValidationError) as ei:
        derive_status(_items((10, 11), (5, -1), (3, 3)))
    assert set(ei.value.errors) == {"i0", "i1"}
    assert ei.value.errors["i0"] == "Cannot exceed ST quantity (10)"
    assert ei.value.errors["i1"] == "Quantity must be >= 0"


def test_accepts_api_dataclasses():
    items = [make_item("a", st=4, received=4), make_item("b", st=2, received=1)]
    assert derive_status(items) == "Partial"


# ---------- projections ----------

def test_is_grn_ignores_stored_status():
    d = make_delivery(items=[make_item(st=3, received=3)], status="Pending")
    assert is_grn(d) is True


def test_is_grn_false_for_inconsistent_items():
    d = make_delivery(items=[make_item(st=3, received=9)], status="Transferred")
    assert is_grn(d) is False


def test_display_status_falls_back_to_stored_label():
    d = make_delivery(items=[make_item(st=3, received=9)], status="partial")
    assert display_status(d) == "Partial"


# ---------- labels / styles ----------

@pytest.mark.parametrize("raw, expected", [
    ("pending", "Pending"),
    (" PARTIAL ", "Partial"),
    ("Transferred", "Transferred"),
    ("", None),
    (None, None),
    ("shipped", None),
])
def test_normalize(raw, expected):
    assert normalize(raw) == expected


def test_label_title_cases_unknown():
    assert label("on hold") == "On Hold"


def test_unknown_status_uses_neutral_style():
    assert style_tokens("weird") == style_tokens("Pending")
    assert style_tokens("Transferred")["badge"] == "success"
    assert style_tokens("partial")["badge"] == "warning"


def test_sort_key_orders_lifecycle():
    assert sorted(["Transferred", "bogus", "Pending", "Partial"], key=sort_key) == [
        "Pending", "Partial", "Transferred", "bogus",
    ]


# ---------- checklist summary ----------

def test_summarize_totals():
    s = summarize(_items((10, 4), (5, 5)))
    assert s == {"submitted": 15.0, "received": 9.0, "missing": 6.0}


def test_all_transferred_needs_every_box_ticked():
    full = [make_item("a", st=2, received=2, is_received=True), make_item("b", st=1, received=1, is_received=False)]
    assert all_transferred(full) is False
    full[1].is_received = True
    assert all_transferred(full) is True
    assert all_transferred([]) is False


# ---------- order and monotonicity ----------

@pytest.mark.parametrize("pairs", [
    ((10, 0), (5, 5), (3, 1)),
    ((10, 10), (5, 5), (1, 1)),
    ((4, 0), (2, 0), (7, 0)),
    ((6, 6), (2, 0)),
])
def test_status_ignores_item_order(pairs):
    expected = derive_status(_items(*pairs))
    for perm in itertools.permutations(pairs):
        assert derive_status(_items(*perm)) == expected


@pytest.mark.parametrize("seed", range(10))
def test_raising_quantities_never_moves_status_back(seed):
    rng = random.Random(seed)
    st = [rng.randint(1, 8) for _ in range(rng.randint(1, 5))]
    received = [0] * len(st)
    rank = {"Pending": 0, "Partial": 1, "Transferred": 2}
    last = rank[derive_status(_items(*zip(st, received)))]
    while received != st:
        idx = rng.choice([i for i, (s, r) in enumerate(zip(st, received)) if r < s])
        received[idx] += 1
        now = rank[derive_status(_items(*zip(st, received)))]
        assert now >= last
        last = now
    assert last == rank["Transferred"]


def test_out_of_range_errors_use_item_keys():
    with pytest.raises(QuantityValidationError) as exc:
        derive_status([{"itemId": "x9", "st_quantity": 2, "received_quantity": 3}, {"st_quantity": 1, "received_quantity": -1}])
    assert set(exc.value.errors) == {"x9", "1"}
