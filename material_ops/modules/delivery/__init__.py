# material_ops/modules/delivery/__init__.py

from .reconciliation import DeliveryReconciler, PreparedItems, ReconcileResult
from .controller import DeliveryController
from .checklist import DeliveryChecklistDialog
from .model import DeliveriesTableModel

__all__ = [
    "DeliveryReconciler",
    "PreparedItems",
    "ReconcileResult",
    "DeliveryController",
    "DeliveryChecklistDialog",
    "DeliveriesTableModel",
]
