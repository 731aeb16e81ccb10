"""Shared fixtures: fake merchant credentials and a deterministic relay."""

import os

os.environ.setdefault("EASEBUZZ_MERCHANT_KEY", "MK")
os.environ.setdefault("EASEBUZZ_SALT", "SALT")
os.environ.setdefault("EASEBUZZ_ENV", "test")
os.environ.setdefault("FRONTEND_URL", "https://hotel.example.com/booking")

import pytest
from pydantic import SecretStr

from bookpay.services.payment_relay.service import GatewayConfig, PaymentRelay

FIXED_TXNID = "TXN_1700000000000"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        merchant_key=SecretStr("MK"),
        salt=SecretStr("SALT"),
        environment="test",
        frontend_url="https://hotel.example.com/booking",
        timeout_seconds=2.0,
    )


@pytest.fixture
def relay(gateway_config: GatewayConfig) -> PaymentRelay:
    return PaymentRelay(gateway_config, txnid_factory=lambda: FIXED_TXNID)


@pytest.fixture
def booking_payload() -> dict:
    return {
        "amount": 1,
        "firstname": "John",
        "email": "john@example.com",
        "phone": "9999999999",
        "productinfo": "HotelBooking",
    }
