"""Central environment-driven settings for the payment relay.

Loaded once at startup. Values come from environment variables or `.env`
(see `.env.example`); merchant credentials are required.
"""

from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class RelaySettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-relay"
    log_level: str = "INFO"
    easebuzz_merchant_key: SecretStr
    easebuzz_salt: SecretStr
    easebuzz_env: Literal["prod", "test"] = "prod"
    frontend_url: str = "http://localhost:5173/booking"
    port: int = 5000
    gateway_timeout_seconds: float = 15.0
    txnid_prefix: str = "TXN_"
    txnid_random_suffix_length: int = 6
    cors_allow_origins: list[str] = ["*"]
    frontend_dist_dir: str | None = None
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = RelaySettings()
