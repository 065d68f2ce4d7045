"""
Material catalog (category -> sub category -> sub category 1), used by the
create forms to offer cascading choices. Catalog rows come in two spellings
("Category" / "Sub category" from the Excel import, or camelCase).
"""
from __future__ import annotations

from typing import Any, Dict, List

from .client import ApiClient


def _row(d: Dict[str, Any]) -> Dict[str, str]:
    return {
        "category": str(d.get("Category") or d.get("category") or "").strip(),
        "sub_category": str(d.get("Sub category") or d.get("subCategory") or "").strip(),
        "sub_category1": str(d.get("Sub category 1") or d.get("subCategory1") or "").strip(),
    }


class MaterialCatalog:
    def __init__(self, rows: List[Dict[str, str]]):
        self.rows = rows

    def categories(self) -> List[str]:
        return sorted({r["category"] for r in self.rows if r["category"]}, key=str.lower)

    def sub_categories(self, category: str) -> List[str]:
        return sorted(
            {r["sub_category"] for r in self.rows if r["category"] == category and r["sub_category"]},
            key=str.lower,
        )

    def sub_categories1(self, category: str, sub_category: str) -> List[str]:
        return sorted(
            {
                r["sub_category1"]
                for r in self.rows
                if r["category"] == category and r["sub_category"] == sub_category and r["sub_category1"]
            },
            key=str.lower,
        )


class CatalogApi:
    PATH = "/material/catalog"

    def __init__(self, client: ApiClient):
        self.client = client

    def load(self) -> MaterialCatalog:
        data = self.client.get(self.PATH) or []
        if isinstance(data, dict):
            data = data.get("materials") or data.get("items") or []
        return MaterialCatalog([_row(d) for d in data if isinstance(d, dict)])
