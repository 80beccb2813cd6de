import os

# -----------------------
# Configuration
# -----------------------
APP_TITLE = os.environ.get("APP_TITLE", "🍵 Franchise Pro")
PLACEHOLDER_MARKER = "YOUR_DEPLOYMENT_ID"
SHEET_API_URL = os.environ.get(
    "SHEET_API_URL",
    f"https://script.google.com/macros/s/{PLACEHOLDER_MARKER}/exec",
)
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "10"))
DELIVERY_DAYS = int(os.environ.get("DELIVERY_DAYS", "2"))
CURRENCY = os.environ.get("CURRENCY", "$")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("LOG_FILE", "")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_CATEGORY = "Ingredients"
DEFAULT_UNIT = "pc"
IMAGE_URL = "https://loremflickr.com/400/400/food?lock={index}"


def is_configured(url=None) -> bool:
    url = SHEET_API_URL if url is None else url
    return bool(url) and PLACEHOLDER_MARKER not in url
