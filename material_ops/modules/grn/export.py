"""
modules/grn/export.py

GRN register exports.

- grn_rows(): one row per received material (deliveries without items get a
  single placeholder row), shared by both formats.
- export_xlsx(): openpyxl workbook with a register sheet and a summary sheet.
- render_report_html() / export_pdf(): Jinja2 template rendered to PDF with WeasyPrint.
"""
from __future__ import annotations

import re
import uuid
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ...constants import DEFAULT_COMPANY_NAME
from ...utils.helpers import fmt_date, fmt_money, fmt_qty
from ...utils.loggers import get_logger
from ..delivery_utilities.grn import GrnAnalytics, grn_analytics

_log = get_logger(__name__)

TEMPLATE_PATH = Path(__file__).resolve().parents[2] / "resources" / "templates" / "grn_report.html"

REGISTER_COLUMNS: List[tuple] = [
    ("Sr No.", 8),
    ("Invoice No", 18),
    ("Date", 14),
    ("Category", 20),
    ("Category 1", 15),
    ("Category 2", 15),
    ("Quantity", 12),
    ("Price", 12),
    ("Discount", 10),
    ("Total", 15),
    ("Project Name", 18),
    ("Vendor Name", 18),
    ("Company Name", 35),
]

_PDF_CSS = """
@page { size: A4 landscape; margin: 12mm 10mm; }
body { font-family: sans-serif; font-size: 9pt; color: #111827; }
"""


def _line_for(delivery, item):
    billing = delivery.billing
    if billing is None:
        return None
    for line in billing.lines:
        if line.material_id == item.item_id or line.material_name in (item.name, item.category):
            return line
    return None


def _discount_text(line) -> str:
    if not line or not line.discount:
        return "-"
    return f"{line.discount:g}%" if line.discount_type == "percentage" else fmt_money(line.discount)


def grn_rows(deliveries: Sequence[Any]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    sr = 0
    for d in deliveries:
        billing = d.billing
        invoice = billing.invoice_number if billing and billing.invoice_number else "-"
        when = fmt_date(billing.bill_date if billing and billing.bill_date else d.created_at)
        company = billing.company_name if billing and billing.company_name else DEFAULT_COMPANY_NAME
        common = {
            "Invoice No": invoice,
            "Date": when,
            "Project Name": d.to_site or "-",
            "Vendor Name": d.from_site or "-",
            "Company Name": company,
        }
        if not d.items:
            sr += 1
            rows.append({
                "Sr No.": sr, **common,
                "Category": "No items", "Category 1": "-", "Category 2": "-",
                "Quantity": "-", "Price": "-", "Discount": "-", "Total": "-",
            })
            continue
        for item in d.items:
            sr += 1
            line = _line_for(d, item)
            rows.append({
                "Sr No.": sr, **common,
                "Category": item.category or "-",
                "Category 1": item.sub_category or "-",
                "Category 2": item.sub_category1 or "-",
                "Quantity": f"{fmt_qty(item.received_quantity or item.st_quantity)} {item.uom}".strip(),
                "Price": line.price if line and line.price else "-",
                "Discount": _discount_text(line),
                "Total": line.amount if line and line.amount else "-",
            })
    return rows


def default_file_name(ext: str, today: Optional[date] = None) -> str:
    return f"GRN_Records_{(today or date.today()).isoformat()}.{ext}"


def safe_file_name(name: str, max_length: int = 100) -> str:
    sanitized = re.sub(r"[^A-Za-z0-9._-]", "_", name)[:max_length]
    return sanitized or f"file_{uuid.uuid4().hex[:8]}"


# ---------- XLSX ----------

def export_xlsx(deliveries: Sequence[Any], path: str, analytics: Optional[GrnAnalytics] = None) -> str:
    from openpyxl import Workbook
    from openpyxl.styles import Alignment, Font, PatternFill
    from openpyxl.utils import get_column_letter

    analytics = analytics or grn_analytics(deliveries)
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    wb = Workbook()
    ws = wb.active
    ws.title = "GRN Records"
    ws.append([name for name, _ in REGISTER_COLUMNS])
    for idx, (_, width) in enumerate(REGISTER_COLUMNS, start=1):
        cell = ws.cell(row=1, column=idx)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")
        ws.column_dimensions[get_column_letter(idx)].width = width
    for row in grn_rows(deliveries):
        ws.append([row.get(name, "") for name, _ in REGISTER_COLUMNS])

    summary = wb.create_sheet("Summary")
    summary.append(["Total GRNs", analytics.total_grns])
    summary.append(["Total Invoices", analytics.total_invoices])
    summary.append(["Total Spend", round(analytics.total_spend, 2)])
    summary.append(["Total Materials", analytics.total_materials])
    summary.append([])
    summary.append(["Site", "GRNs", "Invoices", "Materials", "Amount"])
    for cell in summary[summary.max_row]:
        cell.font = Font(bold=True)
    for s in analytics.site_summary:
        summary.append([s.site_name, s.grn_count, s.invoice_count, s.material_count, round(s.total_amount, 2)])
    summary.column_dimensions["A"].width = 28

    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(out))
    _log.info("GRN register exported to %s (%d rows)", out, ws.max_row - 1)
    return str(out)


# ---------- PDF ----------

def render_report_html(
    deliveries: Sequence[Any],
    analytics: Optional[GrnAnalytics] = None,
    title: str = "GRN Register",
    template_path: Path = TEMPLATE_PATH,
) -> str:
    from jinja2 import Template

    try:
        template_content = template_path.read_text(encoding="utf-8")
    except OSError as e:
        error_msg = f"Could not read template file {template_path}: {e}"
        _log.error(error_msg)
        raise OSError(error_msg) from e

    template = Template(template_content, autoescape=True)
    return template.render(
        title=title,
        generated_on=fmt_date(date.today().isoformat()),
        company=DEFAULT_COMPANY_NAME,
        columns=[name for name, _ in REGISTER_COLUMNS],
        rows=grn_rows(deliveries),
        analytics=analytics or grn_analytics(deliveries),
        money=fmt_money,
    )


def export_pdf(deliveries: Sequence[Any], path: str, analytics: Optional[GrnAnalytics] = None) -> str:
    from weasyprint import CSS, HTML

    html_content = render_report_html(deliveries, analytics)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    HTML(string=html_content).write_pdf(str(out), stylesheets=[CSS(string=_PDF_CSS)])
    _log.info("GRN register exported to %s", out)
    return str(out)
