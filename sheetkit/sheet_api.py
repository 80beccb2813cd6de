"""
Client for the spreadsheet-backed script endpoint.

Reads are GET <url>?action=<name>; writes are POST <url> with a JSON body
carrying "action". Every call is best-effort: failures are logged and come
back as empty lists / (False, message) so the screens can keep rendering.
"""
import logging

import requests

from sheetkit import config as cfg
from sheetkit.normalize import (
    get_value_by_keys,
    normalize_ledger_entry,
    normalize_news,
    normalize_order,
    normalize_product,
    normalize_user,
    unwrap_rows,
    USER_KEYS,
)

logger = logging.getLogger(__name__)


def _get(action, **params):
    if not cfg.is_configured(cfg.SHEET_API_URL):
        logger.warning("SHEET_API_URL is not configured, skipping %s", action)
        return None
    query = {"action": action}
    query.update({k: v for k, v in params.items() if v not in (None, "")})
    try:
        response = requests.get(cfg.SHEET_API_URL, params=query, timeout=cfg.REQUEST_TIMEOUT)
    except requests.exceptions.RequestException as e:
        logger.error("%s failed: %s", action, e)
        return None
    if response.status_code >= 400:
        logger.error("%s returned HTTP %s", action, response.status_code)
        return None
    if response.text.strip().startswith("<"):
        logger.error("%s returned an HTML page; check the script is deployed for 'Anyone'", action)
        return None
    try:
        return response.json()
    except ValueError as e:
        logger.error("%s returned invalid JSON: %s", action, e)
        return None


def _post(action, payload):
    if not cfg.is_configured(cfg.SHEET_API_URL):
        logger.warning("SHEET_API_URL is not configured, cannot %s", action)
        return False, "Ordering endpoint is not configured."
    body = {"action": action}
    body.update(payload)
    try:
        response = requests.post(
            cfg.SHEET_API_URL,
            json=body,
            headers={"Content-Type": "application/json"},
            timeout=cfg.REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as e:
        logger.error("%s failed: %s", action, e)
        return False, f"Could not reach head office: {e}"
    if response.status_code >= 400:
        logger.error("%s returned HTTP %s: %s", action, response.status_code, response.text[:200])
        return False, f"Head office rejected the request (HTTP {response.status_code})."
    logger.info("%s sent", action)
    return True, "Sent"


def _for_franchise(rows, franchise):
    if not franchise:
        return rows
    return [r for r in rows if not r.get("franchiseName") or r["franchiseName"] == franchise]


# -----------------------
# Queries
# -----------------------
def fetch_products():
    rows = unwrap_rows(_get("getProducts"))
    products = [normalize_product(row, i) for i, row in enumerate(rows)]
    logger.info("Loaded %d products", len(products))
    return products


def fetch_users():
    rows = unwrap_rows(_get("getUsers"))
    users = [normalize_user(row) for row in rows]
    users = [u for u in users if u["username"]]
    logger.info("Loaded %d franchise accounts", len(users))
    return users


def fetch_news():
    return [normalize_news(row) for row in unwrap_rows(_get("getNews"))]


def fetch_history(franchise=None):
    rows = unwrap_rows(_get("getHistory", franchiseName=franchise))
    return _for_franchise([normalize_order(row, i) for i, row in enumerate(rows)], franchise)


def fetch_orders(franchise=None):
    rows = unwrap_rows(_get("getOrders", franchiseName=franchise))
    return _for_franchise([normalize_order(row, i) for i, row in enumerate(rows)], franchise)


def fetch_ledger(franchise=None):
    rows = unwrap_rows(_get("getLedger", franchiseName=franchise))
    return _for_franchise([normalize_ledger_entry(row, i) for i, row in enumerate(rows)], franchise)


def remote_login(username, password):
    """
    Ask the endpoint to check a login.

    Returns the user dict when accepted, False when explicitly rejected and
    None when the endpoint gave no usable answer (caller falls back to getUsers).
    """
    result = _get("login", username=username, password=password)
    if not isinstance(result, dict):
        return None
    ok = result.get("success")
    if ok is None and "status" in result:
        ok = str(result["status"]).lower() == "success"
    if ok is None:
        return None
    if not ok:
        return False
    record = result.get("user") if isinstance(result.get("user"), dict) else result
    user = normalize_user(record)
    if not get_value_by_keys(record, USER_KEYS["username"]):
        user["username"] = username
    user["password"] = ""
    return user


# -----------------------
# Mutations
# -----------------------
def submit_order(order, franchise):
    payload = {
        "order": order["id"],
        "date": order["date"],
        "franchiseName": franchise,
        # only id*qty; names and units live in the product sheet
        "items": order["itemsSummary"],
        "total": order["total"],
        "status": order["status"],
        "deliveryDate": order["deliveryDate"],
    }
    ok, msg = _post("submitOrder", payload)
    if ok:
        logger.info("Order %s submitted for %s (%d lines)", order["id"], franchise, len(order["items"]))
    return ok, msg


def submit_ledger(entry, franchise):
    payload = {
        "id": entry["id"],
        "date": entry["date"],
        "type": entry["type"],
        "category": entry["category"],
        "amount": entry["amount"],
        "note": entry["note"],
        "franchiseName": franchise,
    }
    return _post("submitLedger", payload)
