"""
utils/session.py

Operator session context: bearer token, signed-in user and the selected branch.

One SessionContext is created by the shell and handed to every API object and
view that needs identity. It is persisted with QSettings (ini file under the
data dir) and written only on login, logout and branch selection.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from typing import Callable, List, Optional

from PySide6.QtCore import QSettings

from ..constants import BRANCH_SCOPED_ROLES, ROLE_ADMIN
from .loggers import get_logger

_log = get_logger(__name__)

_KEY_TOKEN = "session/token"
_KEY_USER = "session/user"
_KEY_BRANCH = "session/selected_branch"


@dataclass
class UserInfo:
    id: str = ""
    name: str = ""
    role: str = ""
    username: str = ""

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "UserInfo":
        data = data or {}
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            name=str(data.get("name") or data.get("fullName") or data.get("username") or ""),
            role=str(data.get("role") or "").strip().lower(),
            username=str(data.get("username") or ""),
        )


@dataclass
class Branch:
    id: str
    name: str


@dataclass
class SessionContext:
    token: Optional[str] = None
    user: Optional[UserInfo] = None
    selected_branch: Optional[Branch] = None
    settings_path: Optional[str] = None
    _listeners: List[Callable[["SessionContext"], None]] = field(default_factory=list, repr=False)

    # ---- derived ----
    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> str:
        return self.user.role if self.user else ""

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_branch_scoped(self) -> bool:
        return self.role in BRANCH_SCOPED_ROLES

    # ---- persistence ----
    def _settings(self) -> QSettings:
        if self.settings_path:
            return QSettings(self.settings_path, QSettings.IniFormat)
        from ..config import SETTINGS_PATH
        return QSettings(str(SETTINGS_PATH), QSettings.IniFormat)

    def load(self) -> "SessionContext":
        s = self._settings()
        token = s.value(_KEY_TOKEN, "")
        self.token = str(token) if token else None
        self.user = _load_json(s.value(_KEY_USER, ""), UserInfo)
        self.selected_branch = _load_json(s.value(_KEY_BRANCH, ""), Branch)
        return self

    def save(self) -> None:
        s = self._settings()
        s.setValue(_KEY_TOKEN, self.token or "")
        s.setValue(_KEY_USER, json.dumps(asdict(self.user)) if self.user else "")
        s.setValue(_KEY_BRANCH, json.dumps(asdict(self.selected_branch)) if self.selected_branch else "")
        s.sync()

    def start(self, token: str, user: UserInfo) -> None:
        """Replace the whole session after a successful login."""
        self.token = token
        self.user = user
        self.selected_branch = None
        self.save()
        self._notify()

    def clear(self) -> None:
        self.token = None
        self.user = None
        self.selected_branch = None
        s = self._settings()
        for key in (_KEY_TOKEN, _KEY_USER, _KEY_BRANCH):
            s.remove(key)
        s.sync()
        self._notify()

    def set_branch(self, branch: Branch) -> None:
        self.selected_branch = branch
        self.save()
        self._notify()

    def clear_branch(self) -> None:
        self.selected_branch = None
        self.save()
        self._notify()

    # ---- change listeners ----
    def add_listener(self, fn: Callable[["SessionContext"], None]) -> Callable[[], None]:
        self._listeners.append(fn)

        def _remove() -> None:
            if fn in self._listeners:
                self._listeners.remove(fn)
        return _remove

    def _notify(self) -> None:
        for fn in list(self._listeners):
            try:
                fn(self)
            except Exception:
                _log.exception("Session listener failed")


def _load_json(raw, cls):
    if not raw:
        return None
    try:
        data = json.loads(str(raw))
    except ValueError:
        _log.warning("Discarding unreadable session value for %s", cls.__name__)
        return None
    if not isinstance(data, dict):
        return None
    try:
        return cls(**data)
    except TypeError:
        _log.warning("Discarding incompatible session value for %s", cls.__name__)
        return None
