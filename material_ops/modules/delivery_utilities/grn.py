"""
delivery_utilities/grn.py

GRN (goods receipt note) views over upcoming deliveries: the projection of
fully transferred deliveries, list filters and the analytics roll-ups shown
on the GRN page.
"""
from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from ...constants import ORIGIN_PO, ORIGIN_ST
from ...utils.helpers import field, parse_iso
from .status import is_grn


def grn_projection(deliveries: Iterable[Any]) -> List[Any]:
    """Deliveries whose items derive to Transferred, in input order. Status is recomputed here."""
    return [d for d in deliveries if is_grn(d)]


# ---------- filters ----------

@dataclass
class GrnFilters:
    search: str = ""
    site: str = ""
    origin_kind: str = ""          # "", "PO" or "ST"
    invoice_number: str = ""
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def active(self) -> bool:
        return bool(
            self.search.strip() or self.site.strip() or self.origin_kind
            or self.invoice_number.strip() or self.date_from or self.date_to
        )


def _billing(d: Any) -> Any:
    return field(d, "billing", None)


def invoice_of(d: Any) -> str:
    b = _billing(d)
    return (field(b, "invoice_number", "") or "") if b is not None else ""


def _contains(haystack: Any, needle: str) -> bool:
    return needle in str(haystack or "").lower()


def apply_filters(deliveries: Iterable[Any], filters: GrnFilters) -> List[Any]:
    search = filters.search.strip().lower()
    site = filters.site.strip().lower()
    kind = filters.origin_kind.strip().upper()
    invoice = filters.invoice_number.strip().lower()

    out: List[Any] = []
    for d in deliveries:
        if search and not any(
            _contains(v, search)
            for v in (
                field(d, "transfer_number"),
                field(d, "st_id"),
                field(d, "from_site"),
                field(d, "to_site"),
                invoice_of(d),
            )
        ):
            continue
        if site and site not in (
            str(field(d, "from_site", "") or "").lower(),
            str(field(d, "to_site", "") or "").lower(),
        ):
            continue
        if kind in (ORIGIN_PO, ORIGIN_ST) and str(field(d, "type", "") or "").upper() != kind:
            continue
        if invoice and not _contains(invoice_of(d), invoice):
            continue
        if filters.date_from or filters.date_to:
            created = parse_iso(field(d, "created_at"))
            if created is None:
                continue
            day = created.date()
            if filters.date_from and day < filters.date_from:
                continue
            if filters.date_to and day > filters.date_to:
                continue
        out.append(d)
    return out


def site_options(deliveries: Iterable[Any]) -> List[str]:
    """Distinct from/to sites for the site filter combo."""
    names = set()
    for d in deliveries:
        for key in ("from_site", "to_site"):
            v = str(field(d, key, "") or "").strip()
            if v:
                names.add(v)
    return sorted(names, key=str.lower)


# ---------- analytics ----------

@dataclass
class InvoiceSummary:
    invoice_number: str
    total_amount: float = 0.0
    grn_count: int = 0
    material_count: int = 0
    grns: List[str] = dc_field(default_factory=list)


@dataclass
class SiteSummary:
    site_name: str
    total_amount: float = 0.0
    grn_count: int = 0
    material_count: int = 0
    invoice_count: int = 0


@dataclass
class MaterialSummary:
    material_name: str
    total_quantity: float = 0.0
    total_price: float = 0.0
    total_discount: float = 0.0
    total_cost: float = 0.0
    grn_count: int = 0


@dataclass
class GrnAnalytics:
    total_grns: int = 0
    total_invoices: int = 0
    total_spend: float = 0.0
    total_materials: int = 0
    invoice_summary: List[InvoiceSummary] = dc_field(default_factory=list)
    site_summary: List[SiteSummary] = dc_field(default_factory=list)
    material_summary: List[MaterialSummary] = dc_field(default_factory=list)


def _final_amount(d: Any) -> float:
    b = _billing(d)
    if b is None:
        return 0.0
    return float(field(b, "final_amount", 0) or 0)


def _material_name(item: Any) -> str:
    name = field(item, "name", "") or ""
    return name or "Unknown Material"


def _line_for(d: Any, item: Any, name: str) -> Any:
    b = _billing(d)
    if b is None:
        return None
    item_id = field(item, "item_id", "")
    for line in field(b, "lines", None) or []:
        if item_id and field(line, "material_id", "") == item_id:
            return line
        if field(line, "material_name", "") in (name, field(item, "category", "")):
            return line
    return None


def grn_analytics(deliveries: Iterable[Any]) -> GrnAnalytics:
    """
    Totals and per-invoice / per-site / per-material summaries, each sorted by
    amount descending. Deliveries without material-wise billing spread their
    final amount evenly across their items.
    """
    deliveries = list(deliveries)
    result = GrnAnalytics(total_grns=len(deliveries))
    invoices: Dict[str, InvoiceSummary] = {}
    sites: Dict[str, SiteSummary] = {}
    site_invoices: Dict[str, set] = {}
    materials: Dict[str, MaterialSummary] = {}
    unique_invoices = set()

    for d in deliveries:
        items = list(field(d, "items", None) or [])
        amount = _final_amount(d)
        invoice_no = invoice_of(d)
        reference = field(d, "transfer_number", "") or field(d, "st_id", "") or ""
        result.total_spend += amount
        result.total_materials += len(items)
        if invoice_no:
            unique_invoices.add(invoice_no)

        key = invoice_no or reference or "Unknown"
        inv = invoices.setdefault(key, InvoiceSummary(invoice_number=key))
        inv.total_amount += amount
        inv.grn_count += 1
        inv.material_count += len(items)
        inv.grns.append(reference)

        site = field(d, "to_site", "") or "Unknown"
        s = sites.setdefault(site, SiteSummary(site_name=site))
        s.total_amount += amount
        s.grn_count += 1
        s.material_count += len(items)
        if invoice_no:
            site_invoices.setdefault(site, set()).add(invoice_no)

        share = amount / (len(items) or 1)
        for item in items:
            name = _material_name(item)
            m = materials.setdefault(name, MaterialSummary(material_name=name))
            m.total_quantity += float(field(item, "received_quantity", 0) or 0)
            line = _line_for(d, item, name)
            if line is not None:
                m.total_price += float(field(line, "price", 0) or 0)
                m.total_discount += float(field(line, "discount", 0) or 0)
                m.total_cost += float(field(line, "amount", 0) or 0)
            elif amount > 0:
                m.total_cost += share
            m.grn_count += 1

    for site, names in site_invoices.items():
        sites[site].invoice_count = len(names)

    result.total_invoices = len(unique_invoices)
    result.invoice_summary = sorted(invoices.values(), key=lambda x: x.total_amount, reverse=True)
    result.site_summary = sorted(sites.values(), key=lambda x: x.total_amount, reverse=True)
    result.material_summary = sorted(materials.values(), key=lambda x: x.total_cost, reverse=True)
    return result
