"""Unit tests for the gateway signing contract."""

import hashlib
import re
import time
from decimal import Decimal

import pytest

from bookpay.services.payment_relay.signing import (
    SIGNING_DELIMITER_COUNT,
    UDF_PLACEHOLDER_COUNT,
    build_signing_string,
    compute_hash,
    format_amount,
    new_txnid,
    signing_segments,
)

FIELDS = {
    "key": "MK",
    "txnid": "TXN_1700000000000",
    "amount": "1.00",
    "productinfo": "HotelBooking",
    "firstname": "John",
    "email": "john@example.com",
    "salt": "SALT",
}
EXPECTED_STRING = "MK|TXN_1700000000000|1.00|HotelBooking|John|john@example.com|||||||||||SALT"


def test_signing_string_matches_gateway_layout():
    assert build_signing_string(**FIELDS) == EXPECTED_STRING


def test_hash_is_sha512_hex_of_signing_string():
    expected = hashlib.sha512(EXPECTED_STRING.encode("utf-8")).hexdigest()

    digest = compute_hash(build_signing_string(**FIELDS))

    assert digest == expected
    assert re.fullmatch(r"[0-9a-f]{128}", digest)


def test_hash_is_deterministic():
    assert compute_hash(build_signing_string(**FIELDS)) == compute_hash(build_signing_string(**FIELDS))


def test_placeholders_between_email_and_salt():
    """Ten empty udf segments sit between email and salt for any input."""

    signing_string = build_signing_string(**{**FIELDS, "productinfo": "", "firstname": ""})
    segments = signing_string.split("|")

    assert signing_string.count("|") == SIGNING_DELIMITER_COUNT == 16
    assert segments[5] == FIELDS["email"]
    assert segments[6:-1] == [""] * UDF_PLACEHOLDER_COUNT
    assert segments[-1] == "SALT"


@pytest.mark.parametrize("i,j", [(0, 1), (1, 2), (2, 3), (3, 4), (4, 5), (0, 16), (5, 6), (5, 16)])
def test_swapping_segments_changes_hash(i, j):
    segments = signing_segments(**FIELDS)
    swapped = list(segments)
    swapped[i], swapped[j] = swapped[j], swapped[i]

    assert compute_hash("|".join(swapped)) != compute_hash("|".join(segments))


def test_non_ascii_fields_are_utf8_encoded():
    signing_string = build_signing_string(**{**FIELDS, "firstname": "Zoë"})

    assert compute_hash(signing_string) == hashlib.sha512(signing_string.encode("utf-8")).hexdigest()


@pytest.mark.parametrize(
    "raw,expected",
    [
        (1, "1.00"),
        ("1", "1.00"),
        (Decimal("2500"), "2500.00"),
        (Decimal("10.5"), "10.50"),
        (Decimal("10.005"), "10.01"),
        (Decimal("10.004"), "10.00"),
        (0.1, "0.10"),
    ],
)
def test_format_amount_two_places(raw, expected):
    assert format_amount(raw) == expected


def test_new_txnid_uses_prefix_and_millisecond_clock():
    before = time.time_ns() // 1_000_000
    txnid = new_txnid("TXN_", random_suffix_length=0)
    after = time.time_ns() // 1_000_000

    assert txnid.startswith("TXN_")
    assert before <= int(txnid[len("TXN_"):]) <= after


def test_new_txnid_random_suffix_keeps_ids_unique():
    ids = {new_txnid("TXN_", random_suffix_length=6) for _ in range(200)}

    assert len(ids) == 200
    assert all(re.fullmatch(r"TXN_\d{13}_[0-9A-F]{6}", txnid) for txnid in ids)
