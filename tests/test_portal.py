import pandas as pd

from portal import auth
from portal.auth import authenticate
from portal.catalog import ALL_CATEGORIES, filter_products, list_categories
from portal.home import in_flight_count, latest_news
from portal.ui import make_pdf_bytes, money

USERS = [
    {"username": "store01", "password": "1234", "franchiseName": "Daan flagship"},
    {"username": "store02", "password": "abcd", "franchiseName": "Xinyi"},
]
PRODUCTS = [
    {"id": "1", "name": "Jasmine Green Tea", "category": "Ingredients"},
    {"id": "2", "name": "Paper cup", "category": "Packaging"},
    {"id": "3", "name": "Green straw", "category": "Packaging"},
]


def test_authenticate_plaintext_trimmed():
    assert authenticate(" store01 ", "1234", USERS)["franchiseName"] == "Daan flagship"
    assert authenticate("store01", "abcd", USERS) is None
    assert authenticate("", "", USERS) is None


def test_login_falls_back_to_user_sheet(monkeypatch):
    monkeypatch.setattr(auth, "remote_login", lambda u, p: None)
    monkeypatch.setattr(auth, "fetch_users", lambda: USERS)
    user = auth.login("store02", "abcd")
    assert user == {"username": "store02", "password": "", "franchiseName": "Xinyi"}
    assert auth.login("store02", "wrong") is None


def test_login_rejected_remotely_skips_fallback(monkeypatch):
    def no_fallback():
        raise AssertionError("getUsers should not be called")

    monkeypatch.setattr(auth, "remote_login", lambda u, p: False)
    monkeypatch.setattr(auth, "fetch_users", no_fallback)
    assert auth.login("store01", "1234") is None


def test_login_accepted_remotely(monkeypatch):
    remote_user = {"username": "store01", "password": "", "franchiseName": "Daan flagship"}
    monkeypatch.setattr(auth, "remote_login", lambda u, p: remote_user)
    assert auth.login("store01", "1234") == remote_user


def test_catalog_filter():
    assert list_categories(PRODUCTS) == ["Ingredients", "Packaging"]
    assert [p["id"] for p in filter_products(PRODUCTS, ALL_CATEGORIES, "green")] == ["1", "3"]
    assert [p["id"] for p in filter_products(PRODUCTS, "Packaging", "")] == ["2", "3"]
    assert [p["id"] for p in filter_products(PRODUCTS, "Packaging", " GREEN ")] == ["3"]
    assert filter_products(PRODUCTS, "Cleaning", "") == []


def test_home_helpers():
    news = [
        {"title": "old", "content": "", "date": "2025-01-01"},
        {"title": "undated", "content": "", "date": ""},
        {"title": "new", "content": "", "date": "2025/2/25"},
    ]
    assert [n["title"] for n in latest_news(news, limit=2)] == ["new", "old"]
    orders = [{"status": "Pending"}, {"status": "Shipping"}, {"status": "Completed"}, {"status": "Cancelled"}]
    assert in_flight_count(orders) == 2


def test_money_format(monkeypatch):
    monkeypatch.setattr("sheetkit.config.CURRENCY", "$")
    assert money(1200) == "$1,200"
    assert money(2.5) == "$2.50"
    assert money(None) == "$0"


def test_make_pdf_bytes():
    df = pd.DataFrame([{"order_id": "ORD-1", "items": "P1*2", "total": 20}])
    assert make_pdf_bytes("Order History", df).startswith(b"%PDF")
    assert make_pdf_bytes("Empty", pd.DataFrame()).startswith(b"%PDF")
