from __future__ import annotations

from typing import List

from ..utils.session import Branch
from .client import ApiClient


class BranchesApi:
    PATH = "/branches"

    def __init__(self, client: ApiClient):
        self.client = client

    def list(self) -> List[Branch]:
        """Branches sorted by name; rows without a name are skipped."""
        data = self.client.get(self.PATH) or []
        if isinstance(data, dict):
            data = data.get("branches") or data.get("items") or []
        out = [
            Branch(id=str(b.get("_id") or b.get("id") or ""), name=str(b.get("name") or "").strip())
            for b in data
            if isinstance(b, dict)
        ]
        return sorted((b for b in out if b.name), key=lambda b: b.name.lower())

    def site_names(self) -> List[str]:
        return [b.name for b in self.list()]
