# material_ops/modules/site_transfer/__init__.py

from .controller import SiteTransferController
from .view import SiteTransferView
from .form import SiteTransferForm
from .model import SiteTransfersTableModel

__all__ = [
    "SiteTransferController",
    "SiteTransferView",
    "SiteTransferForm",
    "SiteTransfersTableModel",
]
