"""Payment initiation relay.

Validates the booking payment request, signs it with the merchant salt and
submits it server-side to the gateway's initiate-link endpoint. One outbound
call per request; no retries and no local state.
"""

from collections.abc import Callable
from decimal import Decimal, InvalidOperation
from time import perf_counter
from typing import Any, Literal

import httpx
from pydantic import BaseModel, ConfigDict, SecretStr

from bookpay.common.logging import logger, txnid_ctx
from bookpay.common.metrics import gateway_request_duration_seconds, payment_initiations_total
from bookpay.services.payment_relay.errors import (
    GENERIC_REJECTION_MESSAGE,
    GatewayRejectedError,
    InternalRelayError,
    PaymentValidationError,
    UpstreamUnavailableError,
)
from bookpay.services.payment_relay.schemas import GatewaySession, InitiatePaymentRequest
from bookpay.services.payment_relay.signing import (
    build_signing_string,
    compute_hash,
    format_amount,
    new_txnid,
)

GATEWAY_BASE_URLS = {
    "prod": "https://pay.easebuzz.in",
    "test": "https://testpay.easebuzz.in",
}
SUCCESS_STATUSES = (1, True, "1")


class GatewayConfig(BaseModel):
    """Merchant credentials and endpoints, fixed for the life of a relay."""

    model_config = ConfigDict(frozen=True)

    merchant_key: SecretStr
    salt: SecretStr
    environment: Literal["prod", "test"] = "prod"
    frontend_url: str
    timeout_seconds: float = 15.0
    txnid_prefix: str = "TXN_"
    txnid_random_suffix_length: int = 6

    @classmethod
    def from_settings(cls, settings) -> "GatewayConfig":
        return cls(
            merchant_key=settings.easebuzz_merchant_key,
            salt=settings.easebuzz_salt,
            environment=settings.easebuzz_env,
            frontend_url=settings.frontend_url,
            timeout_seconds=settings.gateway_timeout_seconds,
            txnid_prefix=settings.txnid_prefix,
            txnid_random_suffix_length=settings.txnid_random_suffix_length,
        )

    @property
    def base_url(self) -> str:
        return GATEWAY_BASE_URLS[self.environment]

    @property
    def initiate_url(self) -> str:
        return f"{self.base_url}/payment/initiateLink"

    @property
    def success_url(self) -> str:
        return f"{self.frontend_url.rstrip('/')}/paymentsuccess"

    @property
    def failure_url(self) -> str:
        return f"{self.frontend_url.rstrip('/')}/paymentfailure"

    def payment_page_url(self, access_key: str) -> str:
        return f"{self.base_url}/pay/{access_key}"


class PaymentRelay:
    """Signs booking payments and exchanges them for gateway access keys."""

    def __init__(
        self,
        config: GatewayConfig,
        service_name: str = "payment-relay",
        txnid_factory: Callable[[], str] | None = None,
    ) -> None:
        self.config = config
        self.service_name = service_name
        self.txnid_factory = txnid_factory or (
            lambda: new_txnid(config.txnid_prefix, config.txnid_random_suffix_length)
        )

    def _validate_request(self, req: InitiatePaymentRequest) -> str:
        """Reject malformed requests and return the formatted amount.

        Field values are checked but never rewritten; they are signed as sent.
        """

        amount = req.amount
        if not isinstance(amount, Decimal) or not amount.is_finite() or amount <= 0:
            raise PaymentValidationError("amount must be a positive number")
        try:
            formatted_amount = format_amount(amount)
        except InvalidOperation as exc:
            raise PaymentValidationError("amount is out of range") from exc
        if Decimal(formatted_amount) <= 0:
            raise PaymentValidationError("amount must be at least 0.01")

        for field in ("firstname", "email", "phone", "productinfo"):
            value = getattr(req, field)
            if not isinstance(value, str) or not value.strip():
                raise PaymentValidationError(f"{field} is required")
        if "@" not in req.email:
            raise PaymentValidationError("email is invalid")
        # A pipe inside a signed field would shift every later segment.
        for field in ("productinfo", "firstname", "email"):
            if "|" in getattr(req, field):
                raise PaymentValidationError(f"{field} must not contain '|'")
        return formatted_amount

    def build_payload(self, req: InitiatePaymentRequest, txnid: str, amount: str) -> dict[str, str]:
        """Assemble the signed form payload sent to the gateway."""

        key = self.config.merchant_key.get_secret_value()
        signing_string = build_signing_string(
            key=key,
            txnid=txnid,
            amount=amount,
            productinfo=req.productinfo,
            firstname=req.firstname,
            email=req.email,
            salt=self.config.salt.get_secret_value(),
        )
        payload = {
            "key": key,
            "txnid": txnid,
            "amount": amount,
            "productinfo": req.productinfo,
            "firstname": req.firstname,
            "email": req.email,
            "phone": req.phone,
            "surl": self.config.success_url,
            "furl": self.config.failure_url,
            "hash": compute_hash(signing_string),
        }
        if req.lastname:
            payload["lastname"] = req.lastname
        return payload

    def _safe_message(self, message: Any) -> str:
        """Forward the gateway's text unless it is empty or echoes a secret."""

        if not isinstance(message, str) or not message.strip():
            return GENERIC_REJECTION_MESSAGE
        for secret in (self.config.merchant_key, self.config.salt):
            if secret.get_secret_value() and secret.get_secret_value() in message:
                return GENERIC_REJECTION_MESSAGE
        return message

    def _interpret_response(self, resp: httpx.Response, txnid: str) -> GatewaySession:
        """Map the gateway's answer to a session or a taxonomy error."""

        if resp.status_code >= 500:
            logger.error("gateway_unavailable txnid=%s status_code=%s", txnid, resp.status_code)
            raise UpstreamUnavailableError(txnid)
        try:
            body = resp.json()
        except ValueError as exc:
            logger.error(
                "gateway_response_unparseable txnid=%s status_code=%s", txnid, resp.status_code
            )
            raise InternalRelayError(txnid) from exc
        if not isinstance(body, dict):
            logger.error("gateway_response_unexpected txnid=%s type=%s", txnid, type(body).__name__)
            raise InternalRelayError(txnid)

        access_key = body.get("data")
        if body.get("status") in SUCCESS_STATUSES and isinstance(access_key, str) and access_key:
            return GatewaySession(
                access_key=access_key,
                txnid=txnid,
                payment_url=self.config.payment_page_url(access_key),
            )

        message = self._safe_message(body.get("error_desc"))
        logger.warning(
            "gateway_rejected txnid=%s status=%s status_code=%s error=%s",
            txnid,
            body.get("status"),
            resp.status_code,
            message,
        )
        raise GatewayRejectedError(message, txnid)

    async def _post(self, payload: dict[str, str], txnid: str) -> httpx.Response:
        start = perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout_seconds) as client:
                return await client.post(
                    self.config.initiate_url,
                    data=payload,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("gateway_unreachable txnid=%s error=%s", txnid, type(exc).__name__)
            raise UpstreamUnavailableError(txnid) from exc
        finally:
            gateway_request_duration_seconds.labels(service=self.service_name).observe(
                max(0.0, perf_counter() - start)
            )

    async def initiate(self, req: InitiatePaymentRequest) -> GatewaySession:
        """Sign and submit one payment; raises a `PaymentError` subclass on failure."""

        try:
            amount = self._validate_request(req)
        except PaymentValidationError as exc:
            payment_initiations_total.labels(service=self.service_name, outcome=exc.outcome).inc()
            logger.warning("payment_request_invalid reason=%s", exc.public_message)
            raise

        txnid = self.txnid_factory()
        token = txnid_ctx.set(txnid)
        try:
            logger.info("payment_initiate_requested txnid=%s env=%s", txnid, self.config.environment)
            payload = self.build_payload(req, txnid, amount)
            try:
                resp = await self._post(payload, txnid)
                session = self._interpret_response(resp, txnid)
            except (GatewayRejectedError, UpstreamUnavailableError, InternalRelayError) as exc:
                payment_initiations_total.labels(service=self.service_name, outcome=exc.outcome).inc()
                raise
            payment_initiations_total.labels(service=self.service_name, outcome="initiated").inc()
            logger.info("payment_initiated txnid=%s", txnid)
            return session
        finally:
            txnid_ctx.reset(token)
