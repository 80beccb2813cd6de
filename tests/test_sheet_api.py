import json

import pytest
import requests

from sheetkit import config as cfg
from sheetkit import sheet_api

API_URL = "https://script.example.test/macros/s/abc123/exec"


class FakeResponse:
    def __init__(self, payload=None, text=None, status_code=200):
        self.text = text if text is not None else json.dumps(payload)
        self.status_code = status_code

    def json(self):
        return json.loads(self.text)


@pytest.fixture
def api(monkeypatch):
    """Point the client at a fake URL and capture outgoing calls."""
    monkeypatch.setattr(cfg, "SHEET_API_URL", API_URL)
    calls = {"get": [], "post": []}
    replies = {"get": FakeResponse([]), "post": FakeResponse({"result": "ok"})}

    def fake_get(url, params=None, timeout=None):
        calls["get"].append({"url": url, "params": params, "timeout": timeout})
        if isinstance(replies["get"], Exception):
            raise replies["get"]
        return replies["get"]

    def fake_post(url, json=None, headers=None, timeout=None):
        calls["post"].append({"url": url, "json": json})
        if isinstance(replies["post"], Exception):
            raise replies["post"]
        return replies["post"]

    monkeypatch.setattr(sheet_api.requests, "get", fake_get)
    monkeypatch.setattr(sheet_api.requests, "post", fake_post)
    return calls, replies


def test_fetch_products_list_payload(api):
    calls, replies = api
    replies["get"] = FakeResponse([{"id": "P1", "name": "Tea", "price": "450", "minUnit": 5}])
    products = sheet_api.fetch_products()
    assert products[0]["id"] == "P1"
    assert products[0]["price"] == 450.0
    assert products[0]["minUnit"] == 5
    assert calls["get"][0]["params"] == {"action": "getProducts"}
    assert calls["get"][0]["url"] == API_URL


def test_fetch_products_wrapped_payload(api):
    _, replies = api
    replies["get"] = FakeResponse({"data": [{"品名": "Cup"}, {"品名": "Straw"}]})
    assert [p["name"] for p in sheet_api.fetch_products()] == ["Cup", "Straw"]


def test_header_less_rows_are_skipped(api):
    _, replies = api
    replies["get"] = FakeResponse([["P1", "Tea", 10]])
    assert sheet_api.fetch_products() == []
    replies["get"] = FakeResponse([["P1", "Tea", 10], {"id": "P2", "name": "Cup"}])
    assert [p["id"] for p in sheet_api.fetch_products()] == ["P2"]
    replies["get"] = FakeResponse({"data": [["store01", "pw"]]})
    assert sheet_api.fetch_users() == []


def test_html_error_page_yields_empty(api):
    _, replies = api
    replies["get"] = FakeResponse(text="<!DOCTYPE html><html>Sign in</html>")
    assert sheet_api.fetch_products() == []


def test_invalid_json_yields_empty(api):
    _, replies = api
    replies["get"] = FakeResponse(text="oops")
    assert sheet_api.fetch_news() == []


def test_http_error_yields_empty(api):
    _, replies = api
    replies["get"] = FakeResponse({"data": [{"username": "a"}]}, status_code=500)
    assert sheet_api.fetch_users() == []


def test_connection_error_yields_empty(api):
    _, replies = api
    replies["get"] = requests.exceptions.ConnectionError("down")
    assert sheet_api.fetch_products() == []


def test_unconfigured_url_skips_network(monkeypatch):
    monkeypatch.setattr(cfg, "SHEET_API_URL", "https://script.google.com/macros/s/YOUR_DEPLOYMENT_ID/exec")

    def boom(*args, **kwargs):
        raise AssertionError("network should not be touched")

    monkeypatch.setattr(sheet_api.requests, "get", boom)
    monkeypatch.setattr(sheet_api.requests, "post", boom)
    assert sheet_api.fetch_products() == []
    ok, msg = sheet_api.submit_ledger({"id": "L", "date": "", "type": "income", "category": "Sales",
                                       "amount": 1, "note": ""}, "Daan")
    assert ok is False


def test_fetch_users_drops_blank_accounts(api):
    _, replies = api
    replies["get"] = FakeResponse([{"帳號": "store01", "密碼": "pw", "店名": "Daan"}, {"店名": "ghost"}])
    users = sheet_api.fetch_users()
    assert [u["username"] for u in users] == ["store01"]


def test_fetch_history_filters_by_franchise(api):
    calls, replies = api
    replies["get"] = FakeResponse([
        {"order": "A", "店名": "Daan"},
        {"order": "B", "店名": "Xinyi"},
        {"order": "C"},
    ])
    history = sheet_api.fetch_history("Daan")
    assert [o["id"] for o in history] == ["A", "C"]
    assert calls["get"][0]["params"] == {"action": "getHistory", "franchiseName": "Daan"}


def test_fetch_ledger_uses_ledger_action(api):
    calls, replies = api
    replies["get"] = FakeResponse([{"type": "income", "amount": 100, "franchiseName": "Daan"}])
    entries = sheet_api.fetch_ledger("Daan")
    assert entries[0]["amount"] == 100.0
    assert calls["get"][0]["params"]["action"] == "getLedger"


def test_submit_order_payload(api):
    calls, _ = api
    order = {"id": "ORD-1", "date": "2025/03/01 09:30:00", "items": [{"id": "P1", "quantity": 5}],
             "itemsSummary": "P1*5", "total": 2250.0, "status": "Pending", "deliveryDate": "2025/03/03"}
    ok, _ = sheet_api.submit_order(order, "Daan")
    assert ok is True
    body = calls["post"][0]["json"]
    assert body["action"] == "submitOrder"
    assert body["order"] == "ORD-1"
    assert body["items"] == "P1*5"
    assert body["franchiseName"] == "Daan"


def test_submit_order_http_error(api):
    _, replies = api
    replies["post"] = FakeResponse(text="server error", status_code=500)
    order = {"id": "ORD-1", "date": "", "items": [], "itemsSummary": "", "total": 0,
             "status": "Pending", "deliveryDate": ""}
    ok, msg = sheet_api.submit_order(order, "Daan")
    assert ok is False
    assert "500" in msg


def test_submit_ledger_timeout(api):
    calls, replies = api
    replies["post"] = requests.exceptions.Timeout("slow")
    entry = {"id": "LED-1", "date": "2025-03-01", "type": "expense", "category": "Rent",
             "amount": 300.0, "note": ""}
    ok, _ = sheet_api.submit_ledger(entry, "Daan")
    assert ok is False
    assert calls["post"][0]["json"]["action"] == "submitLedger"


def test_remote_login_variants(api):
    _, replies = api
    replies["get"] = FakeResponse({"success": True, "franchiseName": "Daan"})
    user = sheet_api.remote_login("store01", "pw")
    assert user == {"username": "store01", "password": "", "franchiseName": "Daan"}

    replies["get"] = FakeResponse({"status": "success", "user": {"username": "u1", "店名": "Xinyi"}})
    assert sheet_api.remote_login("u1", "pw")["franchiseName"] == "Xinyi"

    replies["get"] = FakeResponse({"success": False})
    assert sheet_api.remote_login("store01", "bad") is False

    replies["get"] = FakeResponse([])
    assert sheet_api.remote_login("store01", "pw") is None
