# tests/test_api_client.py
import pytest
import requests

from material_ops.api import (
    ApiClient,
    ApiConnectionError,
    ApiResponseError,
    Apis,
    UnauthorizedError,
)
from material_ops.api.upcoming_deliveries_api import UpcomingDelivery
from material_ops.utils.session import Branch, UserInfo


class FakeResponse:
    def __init__(self, status=200, body=None):
        self.status_code = status
        self._body = body
        self.content = b"" if body is None else b"{}"
        self.text = ""

    def json(self):
        return self._body


class FakeHttp:
    """requests.Session stand-in: returns queued responses and records requests."""

    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _client(session, *responses):
    http = FakeHttp(*responses)
    return ApiClient(session, base_url="http://api.test/api/", timeout=5, http=http), http


def test_bearer_token_and_envelope(session):
    session.token = "tok"
    client, http = _client(session, FakeResponse(200, {"success": True, "data": {"x": 1}}))
    assert client.get("/things", {"a": 1}) == {"x": 1}
    method, url, kw = http.requests[0]
    assert (method, url) == ("GET", "http://api.test/api/things")
    assert kw["headers"]["Authorization"] == "Bearer tok"
    assert kw["params"] == {"a": 1}
    assert kw["timeout"] == 5


def test_page_reads_pagination(session):
    body = {"success": True, "data": [{"a": 1}, {"a": 2}], "pagination": {"page": 2, "totalPages": 3, "total": 42}}
    client, _ = _client(session, FakeResponse(200, body))
    page = client.page("/list")
    assert (page.items, page.page, page.total_pages, page.total) == ([{"a": 1}, {"a": 2}], 2, 3, 42)


def test_server_message_is_raised(session):
    client, _ = _client(session, FakeResponse(400, {"success": False, "message": "Invalid site"}))
    with pytest.raises(ApiResponseError) as ei:
        client.post("/x", {"a": 1})
    assert ei.value.message == "Invalid site"
    assert ei.value.status == 400


def test_success_false_on_200_is_an_error(session):
    client, _ = _client(session, FakeResponse(200, {"success": False, "message": "Nope"}))
    with pytest.raises(ApiResponseError, match="Nope"):
        client.get("/x")


def test_connection_failures_are_wrapped(session):
    client, _ = _client(session, requests.exceptions.ConnectionError("down"), requests.exceptions.Timeout("slow"))
    with pytest.raises(ApiConnectionError):
        client.get("/x")
    with pytest.raises(ApiConnectionError, match="timed out"):
        client.get("/x")


def test_401_clears_session_and_calls_hook(session):
    session.start("tok", UserInfo(id="u1", name="Ravi", role="admin"))
    client, _ = _client(session, FakeResponse(401, {"message": "expired"}))
    fired = []
    client.set_unauthorized_handler(lambda: fired.append(True))
    with pytest.raises(UnauthorizedError):
        client.get("/material/purchase-orders")
    assert fired == [True]
    assert not session.is_authenticated


def test_401_on_login_keeps_session(session):
    session.start("tok", UserInfo(id="u1", name="Ravi", role="admin"))
    client, _ = _client(session, FakeResponse(401, {"message": "Invalid credentials"}))
    fired = []
    client.set_unauthorized_handler(lambda: fired.append(True))
    with pytest.raises(ApiResponseError) as ei:
        client.post("/auth/login", {"username": "x", "password": "y"})
    assert not isinstance(ei.value, UnauthorizedError)
    assert fired == []
    assert session.is_authenticated


def test_login_returns_token_and_user(session):
    body = {"success": True, "data": {"token": "t1", "user": {"_id": "u9", "name": "Asha", "role": "Supervisor"}}}
    client, _ = _client(session, FakeResponse(200, body))
    token, user = Apis(client).auth.login("asha", "pw")
    assert token == "t1"
    assert (user.id, user.name, user.role) == ("u9", "Asha", "supervisor")


def test_delivery_list_is_branch_scoped(session):
    session.start("tok", UserInfo(id="u1", name="Asha", role="supervisor"))
    session.set_branch(Branch(id="b1", name="Tower B"))
    rows = [
        {"_id": "1", "transfer_number": "ST-1", "type": "ST", "from": "Main Yard", "to": "Tower B", "items": []},
        {"_id": "2", "transfer_number": "ST-2", "type": "ST", "from": "Main Yard", "to": "Tower A", "items": []},
    ]
    client, http = _client(session, FakeResponse(200, {"success": True, "data": rows}))
    page = Apis(client).deliveries.list()
    assert [d.id for d in page.items] == ["1"]
    assert http.requests[0][2]["params"]["selectedBranchId"] == "b1"


def test_delivery_from_api_parses_billing():
    d = UpcomingDelivery.from_api({
        "_id": "d1", "st_id": "ST-9", "type": "po", "from": "Acme", "to": "Tower B",
        "items": [{"itemId": "a", "category": "Cement", "st_quantity": "10", "received_quantity": 4}],
        "billing": {"invoiceNumber": "INV-1", "finalAmount": 90,
                    "materialBilling": [{"materialId": "a", "materialName": "Cement", "price": 100, "discount": 10}]},
    })
    assert d.type == "PO"
    assert d.reference == "ST-9"
    assert d.items[0].st_quantity == 10.0
    assert d.billing.invoice_number == "INV-1"
    assert d.billing.lines[0].discount_type == "flat"
