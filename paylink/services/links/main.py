"""HTTP surface for payment link generation.

`POST /generate` is the public entry point. A password cookie gates the link
endpoints when `AUTH_PASSWORD` is configured.
"""

from time import perf_counter
from typing import Any
from uuid import uuid4

import httpx
import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from paylink.common.auth import TOKEN_COOKIE, TOKEN_MAX_AGE_SECONDS, generate_token, session_is_valid, verify_password
from paylink.common.config import Settings, get_settings, onvo_mode, validate_provider_config
from paylink.common.errors import PaymentLinkError, ValidationError, response_status_for
from paylink.common.logging import configure_logging, logger, request_id_ctx
from paylink.common.metrics import http_request_duration_seconds, http_requests_total, metrics_response
from paylink.common.startup import log_provider_readiness, log_startup_config
from paylink.common.tracing import instrument_app, setup_tracing
from paylink.services.links.schemas import ErrorResponse, PaymentLinkResult, PaymentType, TilopayLinkResponse
from paylink.services.links.service import PaymentLinkService

ERROR_RESPONSES = {status: {"model": ErrorResponse} for status in (400, 401, 500, 502)}
GENERATE_REQUIRED_FIELDS = ("amount", "currency", "type", "provider", "success_url", "cancel_url")
STARTUP_KEYS = [
    "SERVICE_NAME",
    "BASE_URL",
    "AUTH_PASSWORD",
    "TILOPAY_BASE_URL",
    "TILOPAY_SECRET_KEY",
    "ONVO_BASE_URL",
    "ONVO_SECRET_KEY",
]


async def _read_json_object(request: Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body") from None
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _error_response(exc: PaymentLinkError) -> JSONResponse:
    return JSONResponse(status_code=response_status_for(exc), content={"error": exc.message})


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app around one settings value and one link service."""

    settings = settings or get_settings()
    service = PaymentLinkService.from_settings(settings, transport=transport)

    app = FastAPI(title="Paylink")
    app.state.settings = settings
    app.state.service = service

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id and record count/latency for every HTTP call."""

        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        request_id = request.headers.get("x-request-id") or str(uuid4())
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
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
            request_id_ctx.reset(token)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(PaymentLinkError)
    async def payment_link_error_handler(_: Request, exc: PaymentLinkError):
        return _error_response(exc)

    def enforce_session(request: Request) -> None:
        """Reject link requests without a valid session cookie."""

        if not session_is_valid(request.cookies.get(TOKEN_COOKIE), settings.auth_password):
            raise HTTPException(status_code=401, detail="Unauthorized")

    @app.post("/generate", response_model=PaymentLinkResult, responses=ERROR_RESPONSES)
    async def generate(request: Request):
        """Create a hosted checkout link with the requested provider."""

        enforce_session(request)
        body = await _read_json_object(request)
        missing = [field for field in GENERATE_REQUIRED_FIELDS if body.get(field) in (None, "")]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")
        if body.get("type") == PaymentType.RECURRING.value and body.get("interval") in (None, ""):
            body["interval"] = "month"
        result = await service.generate_link(body["provider"], body["type"], body)
        return {"url": result.url}

    @app.post(
        "/tilopay/create-link",
        response_model=TilopayLinkResponse,
        response_model_exclude_none=True,
        responses={status: {"model": TilopayLinkResponse} for status in (400, 401, 500, 502)},
    )
    async def tilopay_create_link(request: Request):
        """TiloPay shortcut with redirect URLs derived from `BASE_URL`."""

        enforce_session(request)
        try:
            body = await _read_json_object(request)
            is_recurring = body.get("isRecurring")
            if not isinstance(is_recurring, bool):
                raise ValidationError("isRecurring must be a boolean")
            base = settings.base_url.rstrip("/")
            raw = {
                "amount": body.get("amount"),
                "currency": body.get("currency"),
                "description": body.get("description"),
                "interval": "month" if is_recurring else None,
                "success_url": f"{base}/success?provider=tilopay",
                "cancel_url": f"{base}/cancel?provider=tilopay",
            }
            payment_type = PaymentType.RECURRING if is_recurring else PaymentType.ONE_TIME
            result = await service.generate_link("tilopay", payment_type.value, raw)
        except PaymentLinkError as exc:
            return JSONResponse(
                status_code=response_status_for(exc),
                content={"success": False, "error": exc.message},
            )
        return {"success": True, "url": result.url}

    @app.post("/auth/login")
    async def login(request: Request):
        """Exchange the shared password for a session cookie."""

        body = await _read_json_object(request)
        password = body.get("password")
        if not isinstance(password, str) or not password:
            raise ValidationError("Password is required")
        if not settings.auth_password:
            raise HTTPException(status_code=500, detail="AUTH_PASSWORD is not configured")
        if not verify_password(password, generate_token(settings.auth_password)):
            logger.info("login_rejected")
            raise HTTPException(status_code=401, detail="Invalid password")
        response = JSONResponse(content={"success": True})
        response.set_cookie(
            TOKEN_COOKIE,
            generate_token(settings.auth_password),
            max_age=TOKEN_MAX_AGE_SECONDS,
            httponly=True,
            samesite="lax",
            secure=settings.base_url.startswith("https://"),
            path="/",
        )
        return response

    @app.post("/auth/logout")
    async def logout():
        """Clear the session cookie."""

        response = JSONResponse(content={"success": True})
        response.delete_cookie(TOKEN_COOKIE, path="/")
        return response

    @app.get("/health")
    def health():
        """Container health probe endpoint."""

        return {
            "ok": True,
            "providers": {name: validate_provider_config(settings, name) for name in ("tilopay", "onvo")},
            "onvo_mode": onvo_mode(settings),
        }

    @app.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    return app


def run() -> None:
    """Console entry point: configure process-wide concerns and serve."""

    settings = get_settings()
    configure_logging(settings)
    log_startup_config(settings.service_name, STARTUP_KEYS)
    log_provider_readiness(settings)
    app = create_app(settings)
    if setup_tracing(settings):
        instrument_app(app)
    uvicorn.run(app, host="0.0.0.0", port=8000, log_config=None)


if __name__ == "__main__":
    run()
