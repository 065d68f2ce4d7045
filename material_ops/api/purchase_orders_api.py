from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..constants import DEFAULT_UOM, LIST_PAGE_SIZE, RECORD_PENDING
from ..utils.branch_scope import branch_params, scope_records
from .client import ApiClient, Page, json_field


def compose_item_name(category: str, sub_category: str = "", sub_category1: str = "") -> str:
    """'Cement' + 'OPC' + '53 Grade' -> 'Cement - OPC - 53 Grade' (blanks skipped)."""
    return " - ".join(p.strip() for p in (category, sub_category, sub_category1) if p and p.strip())


@dataclass
class MaterialLine:
    item_name: str = ""
    category: str = ""
    sub_category: str = ""
    sub_category1: str = ""
    quantity: int = 0
    uom: str = DEFAULT_UOM
    remarks: str = ""

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "MaterialLine":
        category = d.get("category") or d.get("Category") or ""
        sub = d.get("subCategory") or d.get("sub_category") or ""
        sub1 = d.get("subCategory1") or d.get("sub_category1") or ""
        try:
            qty = int(float(d.get("quantity") or 0))
        except (TypeError, ValueError):
            qty = 0
        return cls(
            item_name=d.get("itemName") or d.get("name") or compose_item_name(category, sub, sub1),
            category=category,
            sub_category=sub,
            sub_category1=sub1,
            quantity=qty,
            uom=d.get("uom") or d.get("unit") or DEFAULT_UOM,
            remarks=d.get("remarks") or "",
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "itemName": self.item_name or compose_item_name(self.category, self.sub_category, self.sub_category1),
            "category": self.category,
            "subCategory": self.sub_category,
            "subCategory1": self.sub_category1,
            "quantity": int(self.quantity),
            "uom": self.uom or DEFAULT_UOM,
            "remarks": self.remarks or "",
        }


@dataclass
class PurchaseOrder:
    id: str
    purchase_order_id: str
    delivery_site: str
    requested_by: str
    status: str = RECORD_PENDING
    remarks: str = ""
    request_date: Optional[str] = None
    materials: List[MaterialLine] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "PurchaseOrder":
        return cls(
            id=str(d.get("_id") or d.get("id") or ""),
            purchase_order_id=d.get("purchaseOrderId") or "",
            delivery_site=d.get("deliverySite") or "",
            requested_by=d.get("requestedBy") or "",
            status=(d.get("status") or RECORD_PENDING).strip().lower(),
            remarks=d.get("remarks") or "",
            request_date=d.get("requestDate") or d.get("createdAt"),
            materials=[MaterialLine.from_api(m) for m in d.get("materials") or []],
            attachments=[attachment_url(a) for a in d.get("attachments") or []],
        )


def attachment_url(a: Any) -> str:
    if isinstance(a, dict):
        return a.get("url") or a.get("path") or ""
    return str(a or "")


class PurchaseOrdersApi:
    PATH = "/material/purchase-orders"

    def __init__(self, client: ApiClient):
        self.client = client

    def list(self, page: int = 1, limit: int = LIST_PAGE_SIZE, search: str = "") -> Page:
        params = branch_params(self.client.session_ctx, {"page": page, "limit": limit, "search": search})
        result = self.client.page(self.PATH, params).map(PurchaseOrder.from_api)
        result.items = scope_records(self.client.session_ctx, result.items)
        return result

    def get(self, po_id: str) -> PurchaseOrder:
        return PurchaseOrder.from_api(self.client.get(f"{self.PATH}/{po_id}") or {})

    def create(
        self,
        delivery_site: str,
        requested_by: str,
        materials: Sequence[MaterialLine],
        remarks: str = "",
        attachments: Sequence[str] = (),
    ) -> PurchaseOrder:
        fields = {
            "requestedBy": requested_by,
            "deliverySite": delivery_site,
            "remarks": remarks or "",
            "materials": json_field([m.to_api() for m in materials]),
        }
        data = self.client.upload("POST", self.PATH, fields, "attachments", attachments)
        return PurchaseOrder.from_api(data or {})

    def update(self, po_id: str, changes: Dict[str, Any]) -> PurchaseOrder:
        return PurchaseOrder.from_api(self.client.put(f"{self.PATH}/{po_id}", changes) or {})

    def update_status(self, po_id: str, status: str, remarks: Optional[str] = None) -> PurchaseOrder:
        changes: Dict[str, Any] = {"status": status}
        if remarks is not None:
            changes["remarks"] = remarks
        return self.update(po_id, changes)

    def delete(self, po_id: str) -> None:
        self.client.delete(f"{self.PATH}/{po_id}")

    def delete_attachment(self, po_id: str, index: int) -> None:
        self.client.delete(f"{self.PATH}/{po_id}/attachments/{int(index)}")
