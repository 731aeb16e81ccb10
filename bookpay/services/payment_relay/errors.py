"""Failure taxonomy surfaced by payment initiation.

Each error carries the HTTP status and the message that is safe to return to
the browser. Internal details stay in logs.
"""

GENERIC_REJECTION_MESSAGE = "Payment initiation failed"
INTERNAL_ERROR_MESSAGE = "Internal Server Error"


class PaymentError(Exception):
    """Base class for errors mapped to `{error: ...}` responses."""

    status_code = 500
    outcome = "internal_error"

    def __init__(self, public_message: str = INTERNAL_ERROR_MESSAGE, txnid: str | None = None) -> None:
        super().__init__(public_message)
        self.public_message = public_message
        self.txnid = txnid


class PaymentValidationError(PaymentError):
    """Request is malformed; rejected before any signature is computed."""

    status_code = 400
    outcome = "invalid_request"


class GatewayRejectedError(PaymentError):
    """Gateway answered with a non-success status."""

    status_code = 400
    outcome = "rejected"


class UpstreamUnavailableError(PaymentError):
    """Transport failure, timeout or 5xx while reaching the gateway."""

    outcome = "upstream_unavailable"

    def __init__(self, txnid: str | None = None) -> None:
        super().__init__(INTERNAL_ERROR_MESSAGE, txnid)


class InternalRelayError(PaymentError):
    """Anything else, e.g. a gateway response that cannot be interpreted."""

    def __init__(self, txnid: str | None = None) -> None:
        super().__init__(INTERNAL_ERROR_MESSAGE, txnid)
