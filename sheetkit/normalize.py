"""
Normalisation of spreadsheet rows.

The sheet behind the endpoint is edited by hand, so column headers drift:
English or Chinese names, odd casing, stray spaces. Everything that reads a
row goes through get_value_by_keys() with a list of accepted aliases.
"""
import logging
import math
import re
from datetime import date, datetime

from sheetkit import config as cfg

logger = logging.getLogger(__name__)

PRODUCT_KEYS = {
    "id": ["id", "商品編號", "編號"],
    "name": ["name", "品名", "商品名稱"],
    "price": ["price", "單價", "價格"],
    "minUnit": ["minUnit", "最小單位", "起訂量"],
    "unit": ["unit", "單位"],
    "category": ["category", "分類"],
    "image": ["image", "圖片"],
}
USER_KEYS = {
    "username": ["username", "帳號", "用戶名"],
    "password": ["password", "密碼"],
    "franchiseName": ["franchiseName", "店家名稱", "店名"],
}
NEWS_KEYS = {
    "title": ["title", "標題"],
    "content": ["content", "內容"],
    "date": ["date", "日期"],
}
ORDER_KEYS = {
    "id": ["id", "order", "orderId", "訂單編號"],
    "date": ["date", "日期", "訂購日期"],
    "total": ["total", "總金額", "金額"],
    "items": ["items", "itemsSummary", "品項"],
    "status": ["status", "狀態"],
    "deliveryDate": ["deliveryDate", "配送日期", "預計送達"],
    "franchiseName": ["franchiseName", "店家名稱", "店名"],
}
LEDGER_KEYS = {
    "id": ["id", "編號"],
    "date": ["date", "日期"],
    "type": ["type", "類型"],
    "category": ["category", "分類", "項目"],
    "amount": ["amount", "金額"],
    "note": ["note", "備註", "說明"],
    "franchiseName": ["franchiseName", "店家名稱", "店名"],
}

ORDER_STATUSES = ["Pending", "Preparing", "Shipping", "Completed", "Cancelled"]
STATUS_ALIASES = {
    "待處理": "Pending",
    "準備中": "Preparing",
    "配送中": "Shipping",
    "已完成": "Completed",
    "已取消": "Cancelled",
}
LEDGER_TYPE_ALIASES = {
    "income": "income",
    "收入": "income",
    "expense": "expense",
    "支出": "expense",
}

_ZH_DATETIME = re.compile(
    r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})\s*(上午|下午)?\s*(\d{1,2}):(\d{2})(?::(\d{2}))?$"
)
_PLAIN_DATE = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")


def get_value_by_keys(row, keys):
    if not row:
        return None
    for key in keys:
        if row.get(key) is not None:
            return row[key]
        target = key.lower().strip()
        for row_key in row:
            if str(row_key).lower().strip() == target and row[row_key] is not None:
                return row[row_key]
    return None


def to_number(value, default=0.0) -> float:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        number = float(str(value).strip())
        if math.isfinite(number):
            return number
    except ValueError:
        pass
    text = re.sub(r"[^\d.\-]", "", str(value))
    try:
        return float(text)
    except ValueError:
        return default


def _text(value, default=""):
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        # sheet ids come back as 12.0
        value = int(value)
    text = str(value).strip()
    return text if text else default


def unwrap_rows(payload):
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]
    if not isinstance(payload, list):
        return []
    rows = [row for row in payload if isinstance(row, dict)]
    if len(rows) < len(payload):
        # raw getValues() arrays carry no headers
        logger.warning("Skipped %d rows that are not keyed by column name", len(payload) - len(rows))
    return rows


def parse_date(value):
    """Parse sheet dates: ISO strings, YYYY/M/D and zh-TW 'YYYY/M/D 下午h:mm:ss'."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip().replace(",", " ")
    text = re.sub(r"\s+", " ", text)
    if not text:
        return None

    m = _ZH_DATETIME.match(text)
    if m:
        year, month, day, meridiem, hour, minute, second = m.groups()
        hour = int(hour)
        if meridiem == "下午" and hour < 12:
            hour += 12
        elif meridiem == "上午" and hour == 12:
            hour = 0
        try:
            return datetime(int(year), int(month), int(day), hour, int(minute), int(second or 0))
        except ValueError:
            return None

    m = _PLAIN_DATE.match(text)
    if m:
        try:
            return datetime(*(int(part) for part in m.groups()))
        except ValueError:
            return None

    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        # sheet date cells arrive as UTC instants
        parsed = parsed.astimezone()
    return parsed.replace(tzinfo=None)


def normalize_status(value) -> str:
    text = _text(value)
    if text in STATUS_ALIASES:
        return STATUS_ALIASES[text]
    for status in ORDER_STATUSES:
        if text.lower() == status.lower():
            return status
    return "Pending"


def normalize_product(row, index=0):
    min_unit = int(to_number(get_value_by_keys(row, PRODUCT_KEYS["minUnit"]), 1))
    return {
        "id": _text(get_value_by_keys(row, PRODUCT_KEYS["id"]), f"P-{index}"),
        "name": _text(get_value_by_keys(row, PRODUCT_KEYS["name"]), "Unnamed product"),
        "price": to_number(get_value_by_keys(row, PRODUCT_KEYS["price"]), 0.0),
        "minUnit": min_unit if min_unit > 0 else 1,
        "unit": _text(get_value_by_keys(row, PRODUCT_KEYS["unit"]), cfg.DEFAULT_UNIT),
        "category": _text(get_value_by_keys(row, PRODUCT_KEYS["category"]), cfg.DEFAULT_CATEGORY),
        "image": _text(get_value_by_keys(row, PRODUCT_KEYS["image"]), cfg.IMAGE_URL.format(index=index)),
    }


def normalize_user(row):
    return {
        "username": _text(get_value_by_keys(row, USER_KEYS["username"])),
        "password": _text(get_value_by_keys(row, USER_KEYS["password"])),
        "franchiseName": _text(get_value_by_keys(row, USER_KEYS["franchiseName"]), "Unknown franchise"),
    }


def normalize_news(row):
    return {
        "title": _text(get_value_by_keys(row, NEWS_KEYS["title"]), "Untitled notice"),
        "content": _text(get_value_by_keys(row, NEWS_KEYS["content"])),
        "date": _text(get_value_by_keys(row, NEWS_KEYS["date"])),
    }


def normalize_order(row, index=0):
    return {
        "id": _text(get_value_by_keys(row, ORDER_KEYS["id"]), f"ORD-{index}"),
        "date": _text(get_value_by_keys(row, ORDER_KEYS["date"])),
        "total": to_number(get_value_by_keys(row, ORDER_KEYS["total"]), 0.0),
        "itemsSummary": _text(get_value_by_keys(row, ORDER_KEYS["items"])),
        "status": normalize_status(get_value_by_keys(row, ORDER_KEYS["status"])),
        "deliveryDate": _text(get_value_by_keys(row, ORDER_KEYS["deliveryDate"])),
        "franchiseName": _text(get_value_by_keys(row, ORDER_KEYS["franchiseName"])),
    }


def normalize_ledger_entry(row, index=0):
    raw_type = _text(get_value_by_keys(row, LEDGER_KEYS["type"])).lower()
    return {
        "id": _text(get_value_by_keys(row, LEDGER_KEYS["id"]), f"LED-{index}"),
        "date": _text(get_value_by_keys(row, LEDGER_KEYS["date"])),
        "type": LEDGER_TYPE_ALIASES.get(raw_type, "expense"),
        "category": _text(get_value_by_keys(row, LEDGER_KEYS["category"]), "Other"),
        "amount": abs(to_number(get_value_by_keys(row, LEDGER_KEYS["amount"]), 0.0)),
        "note": _text(get_value_by_keys(row, LEDGER_KEYS["note"])),
        "franchiseName": _text(get_value_by_keys(row, LEDGER_KEYS["franchiseName"])),
    }
