# material_ops/modules/login/controller.py
from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QDialog

from ...api.errors import ApiConnectionError, ApiError
from ...utils.loggers import get_logger
from ...utils.session import UserInfo
from ...utils.tasks import run_task
from .view import LoginDialog

_log = get_logger(__name__)


class LoginController:
    """
    Login flow against AuthApi; a successful login starts the session.

    Public attrs (set after each prompt()):
      - last_error_code: str | None
      - last_error_message: str | None
      - last_username: str | None
    """

    def __init__(self, auth_api, session, parent=None, *, server: str = "") -> None:
        self.auth_api = auth_api
        self.session = session
        self.parent = parent
        self.server = server

        self.last_error_code: Optional[str] = None
        self.last_error_message: Optional[str] = None
        self.last_username: Optional[str] = None
        self._dlg: Optional[LoginDialog] = None

    # ----------------------------- Public API -----------------------------

    def prompt(self, info: Optional[str] = None) -> Optional[UserInfo]:
        """
        Show the dialog until the operator signs in or cancels.
        Returns the signed-in user, or None when cancelled.
        """
        self._reset_last_error()
        dlg = self._dlg = LoginDialog(self.parent, server=self.server)
        dlg.set_info(info)
        dlg.login_requested.connect(self._attempt)
        try:
            if dlg.exec() != QDialog.Accepted:
                if self.last_error_code is None:
                    self._fail("cancelled", "Login cancelled by user.")
                return None
        finally:
            self._dlg = None
        return self.session.user

    # ----------------------------- Internals -----------------------------

    def _attempt(self, username: str, password: str) -> None:
        dlg = self._dlg
        self.last_username = username
        if not username or not password:
            self._fail("empty_fields", "Please enter both username and password.")
            dlg.set_error(self.last_error_message)
            return
        dlg.set_error(None)
        dlg.show_busy(True)
        run_task(
            dlg,
            lambda: self.auth_api.login(username, password),
            lambda result: self._on_success(dlg, result),
            lambda exc: self._on_failure(dlg, exc),
        )

    def _on_success(self, dlg: LoginDialog, result) -> None:
        token, user = result
        self.session.start(token, user)
        self._reset_last_error()
        self.last_username = user.username or self.last_username
        _log.info("Signed in as %s (%s)", user.username or user.name, user.role or "no role")
        dlg.show_busy(False)
        dlg.accept()

    def _on_failure(self, dlg: LoginDialog, exc: BaseException) -> None:
        dlg.show_busy(False)
        if isinstance(exc, ApiConnectionError):
            self._fail("connection", f"Cannot reach the server: {exc.message}")
        elif isinstance(exc, ApiError):
            self._fail("rejected", exc.message or "Invalid username or password.")
        else:
            _log.exception("Login failed unexpectedly", exc_info=exc)
            self._fail("error", "Login failed. Please try again.")
        _log.warning("Login failed for %r: %s", self.last_username, self.last_error_message)
        dlg.set_error(self.last_error_message)
        dlg.password.selectAll()
        dlg.password.setFocus()

    def _reset_last_error(self) -> None:
        self.last_error_code = None
        self.last_error_message = None

    def _fail(self, code: str, message: str) -> None:
        self.last_error_code = code
        self.last_error_message = message
