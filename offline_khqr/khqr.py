# Individual KHQR payload builder (EMV-style TLV with CRC-16 trailer)

import time
from collections import namedtuple
from datetime import datetime
from decimal import Decimal, InvalidOperation

import crcmod.predefined

Currency = namedtuple("Currency", ["code", "numeric", "decimals"])

CURRENCIES = {
    "USD": Currency("USD", "840", 2),
    "KHR": Currency("KHR", "116", 0),
}

KHQRResponse = namedtuple("KHQRResponse", ["status_code", "message", "payload"])

SUCCESS = 0
INFO_REQUIRED = 1
EXPIRATION_INVALID = 2
EXPIRATION_PASSED = 3
VALUE_TOO_LONG = 4

MAX_ACCOUNT_ID = 32
MAX_MERCHANT_NAME = 25
MAX_ACCOUNT_INFORMATION = 32
MAX_ACQUIRING_BANK = 32
MAX_AMOUNT_LENGTH = 13

DEFAULT_MERCHANT_CITY = "Phnom Penh"

_crc16 = crcmod.predefined.mkCrcFun('crc-ccitt-false')


def encode_tlv(tag, value):
    if len(value) > 99:
        raise ValueError(f"Value for tag {tag} is longer than 99 characters")
    return f"{tag}{len(value):02d}{value}"


def parse_tlv(payload):
    result = []
    i = 0
    while i < len(payload):
        tag = payload[i:i+2]
        length_text = payload[i+2:i+4]
        if len(tag) < 2 or not length_text.isdigit():
            raise ValueError(f"Malformed TLV header at offset {i}")
        length = int(length_text)
        value = payload[i+4:i+4+length]
        if len(value) != length:
            raise ValueError(f"Truncated value for tag {tag}")
        result.append({"Id": tag, "Length": length_text, "Value": value})
        i += 4 + length
    return result


def crc16(data):
    return f"{_crc16(data.encode('utf-8')):04X}"


class IndividualInfo:
    def __init__(self, account_id, merchant_name, account_information,
                 acquiring_bank, currency, amount,
                 expiration_timestamp=None, merchant_city=DEFAULT_MERCHANT_CITY):
        self.account_id = account_id
        self.merchant_name = merchant_name
        self.account_information = account_information
        self.acquiring_bank = acquiring_bank
        self.currency = currency
        self.amount = amount
        self.expiration_timestamp = expiration_timestamp
        self.merchant_city = merchant_city


def _decimal_places(amount):
    try:
        exponent = Decimal(str(amount)).normalize().as_tuple().exponent
    except InvalidOperation:
        return None
    if not isinstance(exponent, int):
        return None
    return max(0, -exponent)


def new_individual_info(account_id, merchant_name, account_information,
                        acquiring_bank, currency, amount,
                        expiration_timestamp=None, merchant_city=DEFAULT_MERCHANT_CITY):
    """Validate the fields and build an IndividualInfo.

    Returns ``(ok, message, info)``; ``info`` is None whenever ``ok`` is False.
    """
    if not account_id:
        return False, "Bakong account ID is required", None
    if "@" not in account_id:
        return False, "Bakong account ID is invalid", None
    if len(account_id) > MAX_ACCOUNT_ID:
        return False, "Bakong account ID is too long", None
    if not merchant_name or not merchant_name.strip():
        return False, "Merchant name is required", None
    if len(merchant_name) > MAX_MERCHANT_NAME:
        return False, "Merchant name is too long", None
    if account_information and len(account_information) > MAX_ACCOUNT_INFORMATION:
        return False, "Account information is too long", None
    if acquiring_bank and len(acquiring_bank) > MAX_ACQUIRING_BANK:
        return False, "Acquiring bank is too long", None

    spec = CURRENCIES.get(currency)
    if spec is None:
        return False, f"Unsupported currency: {currency}", None

    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        return False, "Amount must be a number", None
    places = _decimal_places(amount)
    if places is None or not amount > 0:
        return False, "Amount must be greater than zero", None
    if places > spec.decimals:
        return False, f"{spec.code} amount allows at most {spec.decimals} decimal places", None
    if len(format_amount(amount, currency)) > MAX_AMOUNT_LENGTH:
        return False, "Amount is too long", None

    info = IndividualInfo(
        account_id=account_id,
        merchant_name=merchant_name,
        account_information=account_information,
        acquiring_bank=acquiring_bank,
        currency=currency,
        amount=amount,
        expiration_timestamp=expiration_timestamp,
        merchant_city=merchant_city,
    )
    return True, "", info


def format_amount(amount, currency):
    spec = CURRENCIES[currency]
    return f"{Decimal(str(amount)):.{spec.decimals}f}"


class PayloadBuilder:
    def generate_individual(self, info):
        raise NotImplementedError


class IndividualPayloadBuilder(PayloadBuilder):
    def __init__(self, clock=time.time):
        self.clock = clock

    def generate_individual(self, info):
        if info is None:
            return KHQRResponse(INFO_REQUIRED, "Individual info is required", None)

        expiration = info.expiration_timestamp
        if not isinstance(expiration, int) or len(str(expiration)) != 13:
            return KHQRResponse(EXPIRATION_INVALID, "Expiration timestamp must be 13-digit epoch milliseconds", None)
        created = int(self.clock() * 1000)
        if expiration <= created:
            return KHQRResponse(EXPIRATION_PASSED, "Expiration timestamp is in the past", None)

        account = encode_tlv("00", info.account_id)
        if info.account_information:
            account += encode_tlv("01", info.account_information)
        if info.acquiring_bank:
            account += encode_tlv("02", info.acquiring_bank)

        segments = [
            ("00", "01"),
            ("01", "12"),
            ("29", account),
            ("52", "5999"),
            ("53", CURRENCIES[info.currency].numeric),
            ("54", format_amount(info.amount, info.currency)),
            ("58", "KH"),
            ("59", info.merchant_name),
            ("60", info.merchant_city),
            ("99", encode_tlv("00", str(created)) + encode_tlv("01", str(expiration))),
        ]

        try:
            payload = "".join(encode_tlv(tag, value) for tag, value in segments)
        except ValueError as e:
            return KHQRResponse(VALUE_TOO_LONG, str(e), None)

        payload += "6304"
        payload += crc16(payload)
        return KHQRResponse(SUCCESS, None, payload)


def describe_payload(payload):
    try:
        segments = parse_tlv(payload)
    except ValueError:
        return ""
    tag_map = {seg["Id"]: seg["Value"] for seg in segments}

    numeric = {spec.numeric: spec.code for spec in CURRENCIES.values()}
    lines = [
        tag_map.get("59"),
        " ".join(filter(None, [tag_map.get("54"), numeric.get(tag_map.get("53"))])),
    ]

    if "99" in tag_map:
        try:
            stamps = {seg["Id"]: seg["Value"] for seg in parse_tlv(tag_map["99"])}
            expires = datetime.fromtimestamp(int(stamps["01"]) / 1000)
            lines.append("expires " + expires.strftime("%d %b %Y %H:%M"))
        except (ValueError, KeyError, OverflowError, OSError):
            pass
    return " | ".join(filter(None, lines))
