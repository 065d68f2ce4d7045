"""
api/client.py

Thin JSON client over requests.Session for the material backend.

- Base URL and timeout come from config (MATERIAL_OPS_API_URL / MATERIAL_OPS_API_TIMEOUT).
- Every request carries the session bearer token when one is present.
- Responses use the envelope {success, data, message, pagination}; `call()`
  returns the unwrapped `data`, `page()` returns a Page.
- A 401 outside the exempt paths clears the session, runs the registered
  on_unauthorized hook and raises UnauthorizedError.
"""
from __future__ import annotations

import json
import mimetypes
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError, RequestException, Timeout

from ..constants import UNAUTHORIZED_EXEMPT_MARKERS
from ..utils.loggers import get_logger
from .errors import ApiConnectionError, ApiResponseError, UnauthorizedError

_log = get_logger(__name__)


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total: int = 0

    def map(self, fn: Callable[[Any], Any]) -> "Page":
        return Page([fn(x) for x in self.items], self.page, self.total_pages, self.total)


class ApiClient:
    def __init__(
        self,
        session_ctx=None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        http: Optional[requests.Session] = None,
    ) -> None:
        if base_url is None or timeout is None:
            from ..config import API_BASE_URL, API_TIMEOUT
            base_url = API_BASE_URL if base_url is None else base_url
            timeout = API_TIMEOUT if timeout is None else timeout
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session_ctx = session_ctx
        self.http = http or requests.Session()
        self.http.headers.update({"Accept": "application/json"})
        self._on_unauthorized: Optional[Callable[[], None]] = None

    def set_unauthorized_handler(self, fn: Optional[Callable[[], None]]) -> None:
        self._on_unauthorized = fn

    # ---- verbs ----
    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.call("GET", path, params=params)

    def post(self, path: str, json_body: Any = None, **kwargs) -> Any:
        return self.call("POST", path, json_body=json_body, **kwargs)

    def put(self, path: str, json_body: Any = None) -> Any:
        return self.call("PUT", path, json_body=json_body)

    def delete(self, path: str) -> Any:
        return self.call("DELETE", path)

    def page(self, path: str, params: Optional[Dict[str, Any]] = None) -> Page:
        body = self.request("GET", path, params=params)
        data = body.get("data") if isinstance(body, dict) else body
        if isinstance(data, dict):
            # some list endpoints nest the rows under a named key
            for key in ("items", "records", "docs"):
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
        items = list(data or []) if isinstance(data, list) else []
        pag = body.get("pagination") if isinstance(body, dict) else None
        pag = pag or {}
        return Page(
            items=items,
            page=int(pag.get("page") or pag.get("currentPage") or 1),
            total_pages=int(pag.get("totalPages") or pag.get("pages") or 1),
            total=int(pag.get("total") or pag.get("totalItems") or len(items)),
        )

    def upload(
        self,
        method: str,
        path: str,
        fields: Optional[Dict[str, Any]],
        file_field: str,
        paths: Sequence[str],
    ) -> Any:
        """Multipart request: plain form fields plus zero or more files under `file_field`."""
        with ExitStack() as stack:
            files = []
            for p in paths:
                fp = Path(p)
                fh = stack.enter_context(open(fp, "rb"))
                mime = mimetypes.guess_type(fp.name)[0] or "application/octet-stream"
                files.append((file_field, (fp.name, fh, mime)))
            body = self.request(method, path, data=dict(fields or {}), files=files)
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    def call(self, method: str, path: str, **kwargs) -> Any:
        body = self.request(method, path, **kwargs)
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body

    # ---- core ----
    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        data: Optional[Dict[str, Any]] = None,
        files: Optional[Sequence] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        token = getattr(self.session_ctx, "token", None)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        _log.debug("API %s %s", method, path)
        try:
            resp = self.http.request(
                method,
                url,
                params=params,
                json=json_body if files is None and data is None else None,
                data=data,
                files=files,
                headers=headers,
                timeout=self.timeout,
            )
        except Timeout as exc:
            _log.warning("API timeout: %s %s", method, path)
            raise ApiConnectionError(f"Request timed out after {self.timeout}s") from exc
        except RequestsConnectionError as exc:
            _log.warning("API connection error: %s %s", method, path)
            raise ApiConnectionError("Could not reach the server. Check your connection.") from exc
        except RequestException as exc:
            _log.warning("API error: %s %s: %s", method, path, exc)
            raise ApiConnectionError(f"Request failed: {exc}") from exc

        body = _decode(resp)

        if resp.status_code == 401 and not self._is_exempt(path):
            _log.warning("Unauthorized response on %s; clearing session", path)
            if self.session_ctx is not None:
                self.session_ctx.clear()
            if self._on_unauthorized is not None:
                self._on_unauthorized()
            raise UnauthorizedError()

        if not (200 <= resp.status_code < 300):
            raise ApiResponseError(_message(body) or f"Request failed ({resp.status_code})", status=resp.status_code)

        if isinstance(body, dict) and body.get("success") is False:
            raise ApiResponseError(_message(body) or "Request was not successful", status=resp.status_code)
        return body

    @staticmethod
    def _is_exempt(path: str) -> bool:
        return any(marker in path for marker in UNAUTHORIZED_EXEMPT_MARKERS)


def _decode(resp: requests.Response) -> Any:
    if not resp.content:
        return {}
    try:
        return resp.json()
    except ValueError:
        return {"message": resp.text[:500]}


def _message(body: Any) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "msg"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return ""


def json_field(value: Any) -> str:
    """Serialize a nested value for a multipart form field."""
    return json.dumps(value, ensure_ascii=False)
