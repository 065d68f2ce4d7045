from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..constants import LIST_PAGE_SIZE, RECORD_PENDING
from ..utils.branch_scope import branch_params, scope_records
from .client import ApiClient, Page, json_field
from .purchase_orders_api import MaterialLine, attachment_url


@dataclass
class SiteTransfer:
    id: str
    site_transfer_id: str
    from_site: str
    to_site: str
    requested_by: str
    status: str = RECORD_PENDING
    remarks: str = ""
    created_at: Optional[str] = None
    materials: List[MaterialLine] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "SiteTransfer":
        return cls(
            id=str(d.get("_id") or d.get("id") or ""),
            site_transfer_id=d.get("siteTransferId") or "",
            from_site=d.get("fromSite") or "",
            to_site=d.get("toSite") or "",
            requested_by=d.get("requestedBy") or "",
            status=(d.get("status") or RECORD_PENDING).strip().lower(),
            remarks=d.get("remarks") or "",
            created_at=d.get("createdAt"),
            materials=[MaterialLine.from_api(m) for m in d.get("materials") or []],
            attachments=[attachment_url(a) for a in d.get("attachments") or []],
        )


class SiteTransfersApi:
    PATH = "/material/site-transfers"

    def __init__(self, client: ApiClient):
        self.client = client

    def list(self, page: int = 1, limit: int = LIST_PAGE_SIZE, search: str = "") -> Page:
        params = branch_params(self.client.session_ctx, {"page": page, "limit": limit, "search": search})
        result = self.client.page(self.PATH, params).map(SiteTransfer.from_api)
        result.items = scope_records(self.client.session_ctx, result.items)
        return result

    def get(self, st_id: str) -> SiteTransfer:
        return SiteTransfer.from_api(self.client.get(f"{self.PATH}/{st_id}") or {})

    def create(
        self,
        from_site: str,
        to_site: str,
        requested_by: str,
        materials: Sequence[MaterialLine],
        remarks: str = "",
        attachments: Sequence[str] = (),
    ) -> SiteTransfer:
        fields = {
            "fromSite": from_site,
            "toSite": to_site,
            "requestedBy": requested_by,
            "remarks": remarks or "",
            "materials": json_field([m.to_api() for m in materials]),
        }
        data = self.client.upload("POST", self.PATH, fields, "attachments", attachments)
        return SiteTransfer.from_api(data or {})

    def update(self, st_id: str, changes: Dict[str, Any]) -> SiteTransfer:
        return SiteTransfer.from_api(self.client.put(f"{self.PATH}/{st_id}", changes) or {})

    def update_status(self, st_id: str, status: str, remarks: Optional[str] = None) -> SiteTransfer:
        changes: Dict[str, Any] = {"status": status}
        if remarks is not None:
            changes["remarks"] = remarks
        return self.update(st_id, changes)

    def delete(self, st_id: str) -> None:
        self.client.delete(f"{self.PATH}/{st_id}")

    def delete_all(self) -> None:
        self.client.delete(self.PATH)

    def delete_attachment(self, st_id: str, index: int) -> None:
        self.client.delete(f"{self.PATH}/{st_id}/attachments/{int(index)}")
