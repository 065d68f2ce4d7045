# tests/test_validation.py
import pytest

from material_ops.api.purchase_orders_api import MaterialLine
from material_ops.modules.delivery_utilities.validation import (
    MSG_NEGATIVE,
    MSG_NOT_A_NUMBER,
    Resolution,
    apply_resolution,
    find_conflicts,
    msg_exceeds,
    validate_intent_form,
    validate_quantity,
    validate_received,
    validate_site_transfer_form,
)

from conftest import make_item


@pytest.mark.parametrize("value, st, expected", [
    (0, 10, None),
    (10, 10, None),
    ("7", 10, None),
    (11, 10, msg_exceeds(10)),
    (-1, 10, MSG_NEGATIVE),
    ("2.5", 10, MSG_NOT_A_NUMBER),
    ("abc", 10, MSG_NOT_A_NUMBER),
    (None, 10, MSG_NOT_A_NUMBER),
])
def test_validate_quantity(value, st, expected):
    assert validate_quantity(value, st) == expected


def test_exceeds_message_shows_st_quantity():
    assert msg_exceeds(12.0) == "Cannot exceed ST quantity (12)"


def test_validate_received_collects_every_item():
    items = [make_item("a", st=5, received=6), make_item("b", st=5, received=5), make_item("c", st=5, received=-2)]
    assert validate_received(items) == {"a": msg_exceeds(5), "c": MSG_NEGATIVE}


def test_conflicts_are_ticked_short_items_only():
    items = [
        make_item("a", st=10, received=7, is_received=True),
        make_item("b", st=10, received=10, is_received=True),
        make_item("c", st=10, received=3, is_received=False),
    ]
    assert [i.item_id for i in find_conflicts(items)] == ["a"]


def test_auto_fill_sets_st_quantity():
    item = make_item(st=10, received=7, is_received=True)
    out = apply_resolution(item, Resolution.AUTO_FILL)
    assert (out.received_quantity, out.is_received) == (10, True)
    assert item.received_quantity == 7  # input untouched


def test_keep_quantity_keeps_lesser_value():
    out = apply_resolution(make_item(st=10, received=7), Resolution.KEEP_QUANTITY)
    assert (out.received_quantity, out.is_received) == (7, True)


# ---------- create forms ----------

def _line(**kw):
    base = dict(category="Cement", sub_category="OPC", sub_category1="53 Grade", quantity=5, uom="Bags")
    base.update(kw)
    return MaterialLine(**base)


def test_intent_form_lists_every_problem():
    problems = validate_intent_form("", "", [])
    assert problems == [
        "Requested by is required.",
        "Delivery site is required.",
        "Please add at least one material.",
    ]


def test_intent_form_only_needs_category_and_quantity():
    assert validate_intent_form("Tower B", "Ravi", [_line(sub_category="", sub_category1="")]) == []
    assert validate_intent_form("Tower B", "Ravi", [_line(quantity=0)]) == ["Material 1: missing quantity."]


def test_site_transfer_needs_distinct_sites():
    problems = validate_site_transfer_form("Tower B", " tower b ", "Ravi", [_line()])
    assert problems == ["From and To sites must be different."]


def test_site_transfer_needs_full_category_path():
    problems = validate_site_transfer_form("Yard", "Tower B", "", [_line(sub_category1="")])
    assert problems == ["Please select Checked By.", "Material 1: missing sub category 1."]
