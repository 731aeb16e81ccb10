"""Print the initiate-link signing layout and digest for given fields.

Useful when the gateway reports a hash mismatch: compare the layout (salt
redacted) and digest with what the gateway dashboard shows. The salt is read
from `EASEBUZZ_SALT` unless passed explicitly.
"""

import argparse
import os

from bookpay.services.payment_relay.signing import (
    build_signing_string,
    compute_hash,
    format_amount,
    signing_segments,
)


def main() -> None:
    """Parse CLI args and print the segment table plus SHA-512 digest."""

    parser = argparse.ArgumentParser(description="Preview an initiate-link signature.")
    parser.add_argument("--key", default=os.getenv("EASEBUZZ_MERCHANT_KEY"))
    parser.add_argument("--salt", default=os.getenv("EASEBUZZ_SALT"))
    parser.add_argument("--txnid", required=True)
    parser.add_argument("--amount", required=True)
    parser.add_argument("--productinfo", required=True)
    parser.add_argument("--firstname", required=True)
    parser.add_argument("--email", required=True)
    args = parser.parse_args()

    if not args.key or not args.salt:
        raise SystemExit("Provide --key/--salt or set EASEBUZZ_MERCHANT_KEY/EASEBUZZ_SALT")

    fields = {
        "key": args.key,
        "txnid": args.txnid,
        "amount": format_amount(args.amount),
        "productinfo": args.productinfo,
        "firstname": args.firstname,
        "email": args.email,
        "salt": args.salt,
    }
    segments = signing_segments(**fields)
    for position, value in enumerate(segments[:-1]):
        print(f"{position:>2} {value!r}")
    print(f"{len(segments) - 1:>2} <salt redacted>")
    print(f"hash={compute_hash(build_signing_string(**fields))}")


if __name__ == "__main__":
    main()
