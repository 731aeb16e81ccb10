"""API request/response schemas for the payment relay."""

from decimal import Decimal

from pydantic import BaseModel, Field


class InitiatePaymentRequest(BaseModel):
    """Payload accepted by `POST /initiate-payment`."""

    amount: Decimal = Field(gt=0)
    firstname: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = Field(min_length=1)
    productinfo: str = Field(min_length=1)
    lastname: str | None = None


class GatewaySession(BaseModel):
    """Successful initiation: token plus the hosted page it unlocks."""

    access_key: str
    txnid: str
    payment_url: str


class ErrorResponse(BaseModel):
    error: str
