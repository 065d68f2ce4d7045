# tests/test_login.py
import pytest
from PySide6.QtWidgets import QDialog

from material_ops.api.errors import ApiConnectionError, ApiResponseError
from material_ops.modules.login import LoginController, LoginDialog
from material_ops.utils.session import UserInfo


class FakeAuthApi:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def login(self, username, password):
        self.calls.append((username, password))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def make_controller(qtbot, session):
    def _make(auth):
        ctrl = LoginController(auth, session)
        dlg = LoginDialog()
        qtbot.addWidget(dlg)
        ctrl._dlg = dlg
        dlg.login_requested.connect(ctrl._attempt)
        return ctrl, dlg
    return _make


def _submit(dlg, username, password):
    dlg.username.setText(username)
    dlg.password.setText(password)
    dlg._on_submit()


def test_empty_fields_never_call_the_server(make_controller):
    auth = FakeAuthApi()
    ctrl, dlg = make_controller(auth)
    _submit(dlg, "  ", "secret")
    assert ctrl.last_error_code == "empty_fields"
    assert dlg.lbl_error.isVisibleTo(dlg)
    assert auth.calls == []


def test_success_starts_session_and_accepts(make_controller, session, qtbot):
    user = UserInfo(id="u1", name="Ravi Kumar", role="admin", username="ravi")
    ctrl, dlg = make_controller(FakeAuthApi(result=("tok-1", user)))
    _submit(dlg, " ravi ", "pw ")
    qtbot.waitUntil(lambda: dlg.result() == QDialog.Accepted, timeout=5000)
    assert session.token == "tok-1"
    assert session.user == user
    assert ctrl.last_error_code is None
    assert ctrl.last_username == "ravi"


def test_rejected_keeps_dialog_open(make_controller, session, qtbot):
    auth = FakeAuthApi(error=ApiResponseError("Invalid credentials", status=401))
    ctrl, dlg = make_controller(auth)
    _submit(dlg, "ravi", "wrong")
    qtbot.waitUntil(lambda: ctrl.last_error_code is not None, timeout=5000)
    assert ctrl.last_error_code == "rejected"
    assert dlg.lbl_error.text() == "Invalid credentials"
    assert dlg.result() != QDialog.Accepted
    assert dlg.username.isEnabled()
    assert not session.is_authenticated
    assert auth.calls == [("ravi", "wrong")]


def test_unreachable_server(make_controller, qtbot):
    ctrl, dlg = make_controller(FakeAuthApi(error=ApiConnectionError("timed out")))
    _submit(dlg, "ravi", "pw")
    qtbot.waitUntil(lambda: ctrl.last_error_code is not None, timeout=5000)
    assert ctrl.last_error_code == "connection"
    assert "timed out" in ctrl.last_error_message
