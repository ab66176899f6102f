import pytest

from offline_khqr import config
from offline_khqr.khqr import (
    DEFAULT_MERCHANT_CITY,
    EXPIRATION_INVALID,
    EXPIRATION_PASSED,
    SUCCESS,
    VALUE_TOO_LONG,
    IndividualPayloadBuilder,
    crc16,
    describe_payload,
    encode_tlv,
    new_individual_info,
    parse_tlv,
)

NOW = 1700000000.0
EXPIRES = 1700000600000


def make_info(**overrides):
    fields = dict(
        account_id="khqr@ababank",
        merchant_name="Coffee Shop",
        account_information="85512233455",
        acquiring_bank="ABA Bank",
        currency="USD",
        amount=12.5,
        expiration_timestamp=EXPIRES,
    )
    fields.update(overrides)
    return new_individual_info(**fields)


@pytest.fixture
def builder():
    return IndividualPayloadBuilder(clock=lambda: NOW)


def test_crc16_check_value():
    # CRC-16/CCITT-FALSE reference check value
    assert crc16("123456789") == "29B1"


def test_encode_tlv():
    assert encode_tlv("59", "Coffee Shop") == "5911Coffee Shop"


def test_encode_tlv_rejects_long_values():
    with pytest.raises(ValueError):
        encode_tlv("59", "x" * 100)


def test_parse_tlv():
    segments = parse_tlv("000201" + "5911Coffee Shop")
    assert [(s["Id"], s["Value"]) for s in segments] == [("00", "01"), ("59", "Coffee Shop")]


@pytest.mark.parametrize("payload", ["0002", "00020", "5911Coffee", "AB"])
def test_parse_tlv_truncated(payload):
    with pytest.raises(ValueError):
        parse_tlv(payload)


def test_new_individual_info_ok():
    ok, message, info = make_info()
    assert ok is True
    assert message == ""
    assert info.merchant_name == "Coffee Shop"
    assert info.expiration_timestamp == EXPIRES
    assert info.merchant_city == "Phnom Penh"


@pytest.mark.parametrize("overrides, message", [
    ({"account_id": ""}, "Bakong account ID is required"),
    ({"account_id": "ababank"}, "Bakong account ID is invalid"),
    ({"account_id": "a" * 30 + "@bank"}, "Bakong account ID is too long"),
    ({"merchant_name": "   "}, "Merchant name is required"),
    ({"merchant_name": "x" * 26}, "Merchant name is too long"),
    ({"account_information": "1" * 33}, "Account information is too long"),
    ({"acquiring_bank": "b" * 33}, "Acquiring bank is too long"),
    ({"currency": "EUR"}, "Unsupported currency: EUR"),
    ({"amount": "12"}, "Amount must be a number"),
    ({"amount": 0}, "Amount must be greater than zero"),
    ({"amount": float("nan")}, "Amount must be greater than zero"),
    ({"amount": 1.234}, "USD amount allows at most 2 decimal places"),
    ({"currency": "KHR", "amount": 100.5}, "KHR amount allows at most 0 decimal places"),
    ({"amount": 1e20}, "Amount is too long"),
    ({"amount": 12345678901234567.89}, "Amount is too long"),
])
def test_new_individual_info_rejects(overrides, message):
    ok, got, info = make_info(**overrides)
    assert ok is False
    assert got == message
    assert info is None


def test_khr_accepts_whole_float():
    ok, _, info = make_info(currency="KHR", amount=4000.0)
    assert ok is True


def test_build_individual_payload(builder):
    _, _, info = make_info()
    response = builder.generate_individual(info)
    assert response.status_code == SUCCESS
    assert response.message is None

    payload = response.payload
    assert payload.startswith("000201010212")
    assert payload[-8:-4] == "6304"
    assert payload[-4:] == crc16(payload[:-4])

    tags = {s["Id"]: s["Value"] for s in parse_tlv(payload)}
    assert tags["53"] == "840"
    assert tags["54"] == "12.50"
    assert tags["58"] == "KH"
    assert tags["59"] == "Coffee Shop"
    assert tags["60"] == "Phnom Penh"

    account = {s["Id"]: s["Value"] for s in parse_tlv(tags["29"])}
    assert account == {"00": "khqr@ababank", "01": "85512233455", "02": "ABA Bank"}

    stamps = {s["Id"]: s["Value"] for s in parse_tlv(tags["99"])}
    assert stamps == {"00": "1700000000000", "01": str(EXPIRES)}


def test_build_is_repeatable_for_same_clock(builder):
    _, _, info = make_info()
    assert builder.generate_individual(info).payload == builder.generate_individual(info).payload


def test_build_khr_amount(builder):
    _, _, info = make_info(currency="KHR", amount=4000)
    tags = {s["Id"]: s["Value"] for s in parse_tlv(builder.generate_individual(info).payload)}
    assert tags["53"] == "116"
    assert tags["54"] == "4000"


def test_build_skips_empty_optional_fields(builder):
    _, _, info = make_info(account_information="", acquiring_bank="")
    tags = {s["Id"]: s["Value"] for s in parse_tlv(builder.generate_individual(info).payload)}
    assert tags["29"] == "0012khqr@ababank"


@pytest.mark.parametrize("expiration", [None, 1700000600, "1700000600000"])
def test_build_rejects_bad_expiration(builder, expiration):
    _, _, info = make_info(expiration_timestamp=expiration)
    response = builder.generate_individual(info)
    assert response.status_code == EXPIRATION_INVALID
    assert response.payload is None


def test_build_rejects_expired(builder):
    _, _, info = make_info(expiration_timestamp=1699999999000)
    response = builder.generate_individual(info)
    assert response.status_code == EXPIRATION_PASSED
    assert response.message == "Expiration timestamp is in the past"


def test_build_rejects_oversized_account_block(builder):
    _, _, info = make_info(
        account_id="a" * 27 + "@bank",
        account_information="1" * 32,
        acquiring_bank="b" * 32,
    )
    response = builder.generate_individual(info)
    assert response.status_code == VALUE_TOO_LONG
    assert "29" in response.message


def test_build_without_info(builder):
    response = builder.generate_individual(None)
    assert response.status_code != SUCCESS
    assert response.message


def test_describe_payload(builder):
    _, _, info = make_info()
    summary = describe_payload(builder.generate_individual(info).payload)
    assert summary.startswith("Coffee Shop | 12.50 USD | expires ")


def test_describe_unparseable_payload():
    assert describe_payload("not a payload") == ""


def test_amount_at_field_limit(builder):
    ok, _, info = make_info(amount=9999999999.99)
    assert ok is True
    tags = {s["Id"]: s["Value"] for s in parse_tlv(builder.generate_individual(info).payload)}
    assert tags["54"] == "9999999999.99"


def test_merchant_city_default_matches_config():
    _, _, info = make_info()
    assert info.merchant_city == DEFAULT_MERCHANT_CITY == config.MERCHANT_CITY
