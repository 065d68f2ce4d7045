# tests/test_transitions.py
import pytest

from material_ops.modules.delivery_utilities.errors import StatusTransitionError
from material_ops.modules.delivery_utilities.transitions import can_transition, ensure_transition, next_statuses


@pytest.mark.parametrize("current, new, ok", [
    ("pending", "approved", True),
    ("pending", "cancelled", True),
    ("pending", "transferred", False),
    ("approved", "transferred", True),
    ("approved", "pending", False),
    ("transferred", "cancelled", False),
    ("cancelled", "approved", False),
    ("Approved", "APPROVED", True),
    ("pending", "shipped", False),
    ("", "approved", False),
])
def test_can_transition(current, new, ok):
    assert can_transition(current, new) is ok


def test_ensure_transition_returns_normalized_target():
    assert ensure_transition("Pending", " Approved ") == "approved"


def test_ensure_transition_raises_with_both_states():
    with pytest.raises(StatusTransitionError) as ei:
        ensure_transition("transferred", "pending")
    assert (ei.value.current, ei.value.new) == ("transferred", "pending")


def test_next_statuses_starts_with_current():
    assert next_statuses("approved") == ["approved", "transferred", "cancelled"]
    assert next_statuses("cancelled") == ["cancelled"]
    assert next_statuses("") == ["pending", "approved", "transferred", "cancelled"]
