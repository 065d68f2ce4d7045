from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..constants import (
    DEFAULT_COMPANY_NAME,
    DELIVERY_PENDING,
    DISCOUNT_FLAT,
    LIST_PAGE_SIZE,
)
from ..utils.branch_scope import branch_params, scope_records
from .client import ApiClient, Page
from .purchase_orders_api import attachment_url, compose_item_name


def _num(v: Any, default: float = 0.0) -> float:
    try:
        return float(v)
    except (TypeError, ValueError):
        return default


@dataclass
class DeliveryItem:
    item_id: str
    category: str = ""
    sub_category: str = ""
    sub_category1: str = ""
    st_quantity: float = 0
    received_quantity: float = 0
    is_received: bool = False
    uom: str = ""

    @property
    def name(self) -> str:
        return compose_item_name(self.category, self.sub_category, self.sub_category1) or "Unknown Material"

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "DeliveryItem":
        return cls(
            item_id=str(d.get("itemId") or d.get("_id") or ""),
            category=d.get("category") or "",
            sub_category=d.get("sub_category") or d.get("subCategory") or "",
            sub_category1=d.get("sub_category1") or d.get("subCategory1") or "",
            st_quantity=_num(d.get("st_quantity")),
            received_quantity=_num(d.get("received_quantity")),
            is_received=bool(d.get("is_received")),
            uom=d.get("uom") or d.get("unit") or "",
        )

    def to_update(self) -> Dict[str, Any]:
        return {
            "itemId": self.item_id,
            "received_quantity": self.received_quantity,
            "is_received": bool(self.is_received),
        }


@dataclass
class BillingLine:
    material_id: str
    material_name: str
    price: float = 0.0
    discount: float = 0.0
    discount_type: str = DISCOUNT_FLAT
    amount: float = 0.0

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "BillingLine":
        return cls(
            material_id=str(d.get("materialId") or ""),
            material_name=d.get("materialName") or "",
            price=_num(d.get("price")),
            discount=_num(d.get("discount")),
            discount_type=d.get("discountType") or DISCOUNT_FLAT,
            amount=_num(d.get("totalAmount")),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "materialId": self.material_id,
            "materialName": self.material_name,
            "price": float(self.price),
            "discount": float(self.discount),
            "discountType": self.discount_type,
            "totalAmount": float(self.amount),
        }


@dataclass
class Billing:
    invoice_number: str = ""
    bill_date: str = ""
    company_name: str = DEFAULT_COMPANY_NAME
    lines: List[BillingLine] = field(default_factory=list)
    # header-level values, used when there are no material lines
    price: float = 0.0
    discount: float = 0.0
    discount_type: str = DISCOUNT_FLAT
    amount: float = 0.0
    total_price: float = 0.0
    total_discount: float = 0.0
    final_amount: float = 0.0

    @classmethod
    def from_api(cls, d: Optional[Dict[str, Any]]) -> Optional["Billing"]:
        if not d:
            return None
        return cls(
            invoice_number=d.get("invoiceNumber") or "",
            bill_date=d.get("billDate") or "",
            company_name=d.get("companyName") or DEFAULT_COMPANY_NAME,
            lines=[BillingLine.from_api(x) for x in d.get("materialBilling") or []],
            price=_num(d.get("price")),
            discount=_num(d.get("discount")),
            discount_type=d.get("discountType") or DISCOUNT_FLAT,
            amount=_num(d.get("amount")),
            total_price=_num(d.get("totalPrice")),
            total_discount=_num(d.get("totalDiscount")),
            final_amount=_num(d.get("finalAmount")),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "invoiceNumber": self.invoice_number,
            "billDate": self.bill_date,
            "companyName": self.company_name or DEFAULT_COMPANY_NAME,
            "materialBilling": [x.to_api() for x in self.lines],
            "price": float(self.price),
            "discount": float(self.discount),
            "discountType": self.discount_type,
            "amount": float(self.amount),
            "totalPrice": float(self.total_price),
            "totalDiscount": float(self.total_discount),
            "finalAmount": float(self.final_amount),
        }


@dataclass
class UpcomingDelivery:
    id: str
    st_id: str = ""
    transfer_number: str = ""
    type: Optional[str] = None
    from_site: str = ""
    to_site: str = ""
    date: Optional[str] = None
    created_by: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    status: str = DELIVERY_PENDING
    items: List[DeliveryItem] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    billing: Optional[Billing] = None

    @property
    def reference(self) -> str:
        """Human-facing id: transfer number, else st id."""
        return self.transfer_number or self.st_id or self.id

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "UpcomingDelivery":
        kind = (d.get("type") or "").strip().upper() or None
        created_by = d.get("createdBy")
        if isinstance(created_by, dict):
            created_by = created_by.get("name") or created_by.get("username") or ""
        return cls(
            id=str(d.get("_id") or d.get("id") or ""),
            st_id=d.get("st_id") or "",
            transfer_number=d.get("transfer_number") or "",
            type=kind,
            from_site=d.get("from") or d.get("vendor") or "",
            to_site=d.get("to") or "",
            date=d.get("date"),
            created_by=created_by or "",
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
            status=d.get("status") or DELIVERY_PENDING,
            items=[DeliveryItem.from_api(x) for x in d.get("items") or []],
            attachments=[attachment_url(a) for a in d.get("attachments") or []],
            billing=Billing.from_api(d.get("billing")),
        )


class UpcomingDeliveriesApi:
    PATH = "/material/upcoming-deliveries"

    def __init__(self, client: ApiClient):
        self.client = client

    def list(self, page: int = 1, limit: int = LIST_PAGE_SIZE, search: str = "") -> Page:
        params = branch_params(self.client.session_ctx, {"page": page, "limit": limit, "search": search})
        result = self.client.page(self.PATH, params).map(UpcomingDelivery.from_api)
        result.items = scope_records(self.client.session_ctx, result.items)
        return result

    def get(self, delivery_id: str) -> UpcomingDelivery:
        return UpcomingDelivery.from_api(self.client.get(f"{self.PATH}/{delivery_id}") or {})

    def create(self, payload: Dict[str, Any]) -> UpcomingDelivery:
        return UpcomingDelivery.from_api(self.client.post(self.PATH, payload) or {})

    def update_items(self, delivery_id: str, items: Sequence[DeliveryItem]) -> UpcomingDelivery:
        """All items in one request; the backend applies them together or not at all."""
        body = {"items": [x.to_update() for x in items]}
        return UpcomingDelivery.from_api(self.client.put(f"{self.PATH}/{delivery_id}/items", body) or {})

    def update_status(self, delivery_id: str, status: str) -> UpcomingDelivery:
        return UpcomingDelivery.from_api(
            self.client.put(f"{self.PATH}/{delivery_id}/status", {"status": status}) or {}
        )

    def update_billing(self, delivery_id: str, billing: Billing) -> UpcomingDelivery:
        return UpcomingDelivery.from_api(
            self.client.put(f"{self.PATH}/{delivery_id}/billing", billing.to_api()) or {}
        )

    def upload_receipts(self, delivery_id: str, paths: Sequence[str]) -> UpcomingDelivery:
        data = self.client.upload("POST", f"{self.PATH}/{delivery_id}/receipts", None, "receipts", paths)
        return UpcomingDelivery.from_api(data or {})

    def delete_attachment(self, delivery_id: str, index: int) -> None:
        self.client.delete(f"{self.PATH}/{delivery_id}/attachments/{int(index)}")

    def delete(self, delivery_id: str) -> None:
        self.client.delete(f"{self.PATH}/{delivery_id}")

    def delete_all(self) -> None:
        self.client.delete(self.PATH)
