# material_ops/modules/grn/__init__.py
from .billing_service import GrnBillingService, SAVE_TOPICS
from .controller import GrnController
from .billing_form import GrnBillingDialog
from .export import export_pdf, export_xlsx

__all__ = [
    "GrnBillingService",
    "SAVE_TOPICS",
    "GrnController",
    "GrnBillingDialog",
    "export_pdf",
    "export_xlsx",
]
