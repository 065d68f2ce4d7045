from __future__ import annotations

from typing import Tuple

from ..utils.session import UserInfo
from .client import ApiClient
from .errors import ApiResponseError


class AuthApi:
    PATH = "/auth/login"

    def __init__(self, client: ApiClient):
        self.client = client

    def login(self, username: str, password: str) -> Tuple[str, UserInfo]:
        """
        Returns (token, user). The caller stores them in the session context;
        a wrong password surfaces as ApiResponseError with the server message.
        """
        body = self.client.request("POST", self.PATH, json_body={"username": username, "password": password})
        data = body.get("data") if isinstance(body, dict) and isinstance(body.get("data"), dict) else body
        token = (data or {}).get("token") if isinstance(data, dict) else None
        if not token:
            raise ApiResponseError("Login failed: no token in response")
        return str(token), UserInfo.from_api(data.get("user"))
