# ================= CONFIG =================
import logging
import os

from offline_khqr.khqr import DEFAULT_MERCHANT_CITY

# Single-bank setup for now; multi-bank would turn these into form fields.
ACCOUNT_ID = os.environ.get("OFFLINE_KHQR_ACCOUNT_ID", "khqr@ababank")
ACQUIRING_BANK = os.environ.get("OFFLINE_KHQR_BANK", "ABA Bank")
MERCHANT_CITY = DEFAULT_MERCHANT_CITY
CURRENCY = "USD"

EXPIRATION_MINUTES = 10

DEFAULT_STORE_NAME = "Coffee Shop"
DEFAULT_ACCOUNT_INFO = "85512233455"

QR_SCALE = 10     # pixels per QR module
QR_BORDER = 4     # quiet zone, in modules
PREVIEW_SIZE = 250

PAYLOAD_KEY = "last_khqr_payload"
SETTINGS_FILE = os.environ.get(
    "OFFLINE_KHQR_SETTINGS",
    os.path.join(os.path.expanduser("~"), ".offline_khqr.json"),
)


def resolve_log_level(name):
    name = (name or "").upper()
    return name if isinstance(logging.getLevelName(name), int) else "INFO"


LOG_LEVEL = resolve_log_level(os.environ.get("OFFLINE_KHQR_LOG_LEVEL", "INFO"))
# =========================================
