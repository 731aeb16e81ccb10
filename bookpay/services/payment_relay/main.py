"""Public HTTP surface of the payment relay.

The browser posts booking payment details here; merchant credentials never
leave the server. Optionally serves the booking SPA build under `/booking`.
"""

from pathlib import Path
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import APIRouter, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, RedirectResponse

from bookpay.common.config import settings
from bookpay.common.logging import configure_logging, logger, trace_id_ctx
from bookpay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from bookpay.common.startup import log_startup_config
from bookpay.common.tracing import instrument_app, setup_tracing
from bookpay.services.payment_relay.errors import INTERNAL_ERROR_MESSAGE, PaymentError
from bookpay.services.payment_relay.schemas import (
    ErrorResponse,
    GatewaySession,
    InitiatePaymentRequest,
)
from bookpay.services.payment_relay.service import GatewayConfig, PaymentRelay

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    [
        "SERVICE_NAME",
        "EASEBUZZ_ENV",
        "EASEBUZZ_MERCHANT_KEY",
        "EASEBUZZ_SALT",
        "FRONTEND_URL",
        "GATEWAY_TIMEOUT_SECONDS",
        "PORT",
    ],
)

UNMATCHED_ROUTE = "unmatched"

router = APIRouter()


async def payment_error_handler(_: Request, exc: PaymentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed bodies with the same `{error}` shape as other failures."""

    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field or 'body'}: {first.get('msg', 'invalid value')}"
    else:
        message = "invalid request"
    logger.warning("payment_request_invalid reason=%s", message)
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_error_handler(_: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error type=%s", type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


@router.post(
    "/initiate-payment",
    response_model=GatewaySession,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
@router.post("/booking/initiate-payment", response_model=GatewaySession, include_in_schema=False)
async def initiate_payment(
    req: InitiatePaymentRequest,
    request: Request,
    x_correlation_id: str | None = Header(default=None),
):
    """Sign the booking payment and return the gateway access key."""

    trace_id_ctx.set(x_correlation_id or str(uuid4()))
    relay: PaymentRelay = request.app.state.relay
    return await relay.initiate(req)


@router.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}


@router.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


def mount_frontend(app: FastAPI, dist_dir: Path) -> None:
    """Serve the booking SPA build, falling back to index.html for client routes."""

    index_file = dist_dir / "index.html"

    @app.get("/", include_in_schema=False)
    def root_redirect():
        return RedirectResponse(url="/booking")

    @app.get("/booking/{path:path}", include_in_schema=False)
    def booking_spa(path: str):
        candidate = (dist_dir / path).resolve()
        if path and candidate.is_file() and dist_dir.resolve() in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(index_file)


def create_app(
    config: GatewayConfig | None = None,
    frontend_dist_dir: str | None = None,
) -> FastAPI:
    """Build the relay app; arguments default to the process settings."""

    app = FastAPI(title="Booking Payment Relay")
    app.state.relay = PaymentRelay(
        config or GatewayConfig.from_settings(settings),
        service_name=settings.service_name,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Record request count and latency; paths without a route share one label."""

        start = perf_counter()
        route = UNMATCHED_ROUTE
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=settings.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=settings.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()

    app.add_exception_handler(PaymentError, payment_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)

    dist_setting = frontend_dist_dir or settings.frontend_dist_dir
    if dist_setting:
        dist_dir = Path(dist_setting)
        if dist_dir.is_dir():
            mount_frontend(app, dist_dir)
        else:
            logger.warning("frontend_dist_dir_missing path=%s", dist_dir)

    instrument_app(app)
    return app


app = create_app()


def run() -> None:
    """Console entrypoint: serve the relay on the configured port."""

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
