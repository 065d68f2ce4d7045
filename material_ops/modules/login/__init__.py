# material_ops/modules/login/__init__.py

"""
Login module package exports.

- LoginController: runs AuthApi.login off the UI thread and starts the session.
- LoginDialog: username/password dialog with error and info banners.
"""

from .controller import LoginController
from .view import LoginDialog

__all__ = [
    "LoginController",
    "LoginDialog",
]
