"""
Typed link from an upcoming delivery back to the record it was created from.

The delivery's explicit `type` field decides the kind; ids are never sniffed
for a 'PO'/'ST' prefix. A missing or unrecognised type gives kind=None.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

from ...constants import (
    ORIGIN_PO,
    ORIGIN_ST,
    TOPIC_DELIVERY,
    TOPIC_INTENT,
    TOPIC_SITE_TRANSFER,
    TOPIC_UPCOMING_DELIVERY,
    TOPICS,
)
from ...utils.helpers import field

FANOUT: dict[str, FrozenSet[str]] = {
    ORIGIN_PO: frozenset({TOPIC_UPCOMING_DELIVERY, TOPIC_DELIVERY, TOPIC_INTENT}),
    ORIGIN_ST: frozenset({TOPIC_UPCOMING_DELIVERY, TOPIC_DELIVERY, TOPIC_SITE_TRANSFER}),
}


@dataclass(frozen=True)
class Origin:
    kind: Optional[str]
    origin_id: str

    @property
    def known(self) -> bool:
        return self.kind in (ORIGIN_PO, ORIGIN_ST)


def origin_of(delivery: Any) -> Origin:
    kind = str(field(delivery, "type", "") or "").strip().upper()
    origin_id = field(delivery, "transfer_number", "") or field(delivery, "st_id", "") or ""
    return Origin(kind if kind in (ORIGIN_PO, ORIGIN_ST) else None, str(origin_id))


def topics_for_delivery(origin_kind: Optional[str]) -> FrozenSet[str]:
    """Topics to publish after a delivery changes; unknown kinds refresh everything."""
    return FANOUT.get(str(origin_kind or "").upper(), frozenset(TOPICS))
