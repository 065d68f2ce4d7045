# material_ops/modules/intent/__init__.py

from .controller import IntentController
from .view import IntentView
from .form import IntentForm
from .model import IntentsTableModel

__all__ = [
    "IntentController",
    "IntentView",
    "IntentForm",
    "IntentsTableModel",
]
