# Form state and the Generate / Save / Restore actions

import logging
import math
import re

from offline_khqr import config
from offline_khqr.khqr import new_individual_info
from offline_khqr.timestamps import expiration_timestamp_millis

log = logging.getLogger(__name__)

AMOUNT_PATTERN = re.compile(r"\d+(\.\d*)?|\.\d+", re.ASCII)

INVALID_AMOUNT = "Invalid amount. Please enter amount > 0"
SAVED = "Saved KHQR payload locally"
SAVE_FAILED = "Could not save KHQR payload"

IDLE = "idle"
ERROR = "error"
READY = "ready"


def parse_amount(text):
    if not AMOUNT_PATTERN.fullmatch(text or ""):
        return None
    amount = float(text)
    if not math.isfinite(amount) or amount <= 0:
        return None
    return amount


def generation_error(message):
    return f"Error generating KHQR: {message or 'Unknown error'}"


class FormController:
    """Holds the form inputs and outputs and reacts to user actions.

    The payload builder, QR renderer and settings store are passed in so the
    window and the tests can each supply their own.
    """

    def __init__(self, builder, renderer, store,
                 expiration_minutes=config.EXPIRATION_MINUTES):
        self.builder = builder
        self.renderer = renderer
        self.store = store
        self.expiration_minutes = expiration_minutes

        self.store_name = config.DEFAULT_STORE_NAME
        self.account_info = config.DEFAULT_ACCOUNT_INFO
        self.amount_text = ""
        self.currency = config.CURRENCY

        self.khqr_string = ""
        self.qr_image = None
        self.error_message = ""
        self.status_message = ""

    @property
    def state(self):
        if self.error_message:
            return ERROR
        if self.khqr_string:
            return READY
        return IDLE

    def _fail(self, message):
        self.error_message = message
        self.khqr_string = ""
        self.qr_image = None
        return False

    def _show(self, payload):
        self.khqr_string = payload
        self.qr_image = self.renderer.render(payload)

    def generate(self):
        self.error_message = ""
        self.status_message = ""

        amount = parse_amount(self.amount_text)
        if amount is None:
            return self._fail(INVALID_AMOUNT)

        ok, message, info = new_individual_info(
            account_id=config.ACCOUNT_ID,
            merchant_name=self.store_name,
            account_information=self.account_info,
            acquiring_bank=config.ACQUIRING_BANK,
            currency=self.currency,
            amount=amount,
            expiration_timestamp=expiration_timestamp_millis(self.expiration_minutes),
            merchant_city=config.MERCHANT_CITY,
        )
        if not ok:
            return self._fail(generation_error(message))

        response = self.builder.generate_individual(info)
        if response.status_code != 0 or not response.payload:
            return self._fail(generation_error(response.message))

        self._show(response.payload)
        return True

    def save(self):
        if not self.khqr_string:
            return False

        if self.store.set(config.PAYLOAD_KEY, self.khqr_string) is False:
            self.status_message = SAVE_FAILED
            return False

        log.info("Saved KHQR payload locally")
        self.status_message = SAVED
        return True

    def restore(self):
        saved = self.store.get(config.PAYLOAD_KEY)
        if not saved:
            return False

        self.error_message = ""
        self._show(saved)
        return True
