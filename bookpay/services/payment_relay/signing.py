"""Easebuzz initiate-link signing contract.

The gateway recomputes SHA-512 over a pipe-delimited string and compares it
with the submitted `hash`. Segment order and count are fixed: key, txnid,
amount, productinfo, firstname, email, udf1..udf10 (always empty here) and
finally the salt: 17 segments joined by 16 pipes.
"""

import hashlib
import time
from decimal import ROUND_HALF_UP, Decimal
from uuid import uuid4

SIGNING_SEGMENT_COUNT = 17
SIGNING_DELIMITER_COUNT = SIGNING_SEGMENT_COUNT - 1
UDF_PLACEHOLDER_COUNT = 10
TWO_PLACES = Decimal("0.01")


def format_amount(amount: Decimal | int | float | str) -> str:
    """Render an amount with exactly two fraction digits, rounding half-up."""

    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return str(value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def new_txnid(prefix: str = "TXN_", random_suffix_length: int = 6) -> str:
    """Prefix + epoch milliseconds, plus an optional random hex suffix."""

    txnid = f"{prefix}{time.time_ns() // 1_000_000}"
    if random_suffix_length > 0:
        txnid = f"{txnid}_{uuid4().hex[:random_suffix_length].upper()}"
    return txnid


def signing_segments(
    key: str,
    txnid: str,
    amount: str,
    productinfo: str,
    firstname: str,
    email: str,
    salt: str,
) -> list[str]:
    return [
        key,
        txnid,
        amount,
        productinfo,
        firstname,
        email,
        *([""] * UDF_PLACEHOLDER_COUNT),
        salt,
    ]


def build_signing_string(
    key: str,
    txnid: str,
    amount: str,
    productinfo: str,
    firstname: str,
    email: str,
    salt: str,
) -> str:
    """Join the signed fields in gateway order; `amount` must already be formatted."""

    return "|".join(signing_segments(key, txnid, amount, productinfo, firstname, email, salt))


def compute_hash(signing_string: str) -> str:
    """Lowercase hex SHA-512 of the UTF-8 signing string."""

    return hashlib.sha512(signing_string.encode("utf-8")).hexdigest()
