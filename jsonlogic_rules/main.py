import hmac
import logging
import re
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jsonlogic_rules.api.routes.health import router as health_router
from jsonlogic_rules.api.routes.rules import router as rules_router
from jsonlogic_rules.core.config import AppEnvironment, settings
from jsonlogic_rules.core.errors import RulesEngineError, get_status_code
from jsonlogic_rules.core.middleware import RequestSizeLimitMiddleware
from jsonlogic_rules.core.observability import (
    ObservabilityMiddleware,
    configure_structured_logging,
    extract_request_context,
    metrics_endpoint,
)

# Configure structured logging before creating logger
if settings.observability_structured_logs:
    configure_structured_logging(settings.app_log_level)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Engine messages can leak file paths, tracebacks or object reprs
_LEAKY_TEXT = re.compile(
    r"[/\\][\w/\\.-]+\.py|Traceback \(most recent call last\)|\bat 0x[0-9a-f]+\b",
    re.IGNORECASE,
)


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        return "[REDACTED]" if _LEAKY_TEXT.search(value) else value
    if isinstance(value, dict):
        return {key: _redact(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_redact(item) for item in value]
    return value


def _public_details(details: dict[str, Any]) -> dict[str, Any]:
    """Error details as clients see them: redacted in prod, untouched elsewhere."""
    if settings.app_env == AppEnvironment.PROD:
        return _redact(details)
    return details


def _error_response(
    status_code: int,
    error: str,
    message: Any,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": details or {}},
        headers=headers,
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Sets up:
    - Observability middleware (request IDs, metrics, request logs)
    - Request size limit
    - CORS middleware
    - Exception handlers for domain errors
    - API routers
    - Token-protected metrics endpoint for Prometheus scraping
    """
    app = FastAPI(
        title="JSONLogic Rules API",
        description="Evaluate JSONLogic rules and check their data dependencies",
        version="0.1.0",
    )

    # ============================================================================
    # Middleware (last added runs first)
    # ============================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=settings.request_max_size_mb)

    if settings.observability_enabled:
        app.add_middleware(ObservabilityMiddleware)

    # ============================================================================
    # Exception Handlers
    # ============================================================================

    @app.exception_handler(RulesEngineError)
    async def rules_engine_error_handler(request: Request, exc: RulesEngineError) -> JSONResponse:
        status_code = get_status_code(exc)
        level = logging.ERROR if status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "%s on %s: %s",
            type(exc).__name__,
            request.url.path,
            exc.message,
            extra={"details": exc.details, **extract_request_context(request)},
        )
        return _error_response(
            status_code, type(exc).__name__, exc.message, _public_details(exc.details)
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        """Give HTTP exceptions the same body shape as domain errors."""
        if exc.status_code >= 500:
            logger.error(
                "HTTP %s on %s: %s",
                exc.status_code,
                request.url.path,
                exc.detail,
                extra=extract_request_context(request),
            )
        return _error_response(exc.status_code, "HTTPException", exc.detail, headers=exc.headers)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log anything unexpected in full; the client only gets a generic 500."""
        logger.exception(
            "Unhandled %s on %s",
            type(exc).__name__,
            request.url.path,
            extra=extract_request_context(request),
        )
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "InternalServerError",
            "An unexpected error occurred",
        )

    # ============================================================================
    # Router Registration
    # ============================================================================

    app.include_router(health_router, prefix=API_PREFIX)
    app.include_router(rules_router, prefix=API_PREFIX)

    # ============================================================================
    # Metrics Endpoint (Prometheus) - Token Protected
    # ============================================================================

    async def protected_metrics(request: Request) -> Response:
        """
        Protected Prometheus metrics endpoint.

        Always requires the X-Metrics-Token header to match METRICS_TOKEN.
        """
        expected_token = settings.metrics_token
        if not expected_token:
            logger.error(
                "Metrics endpoint accessed but METRICS_TOKEN not configured",
                extra={"security_event": True, "event_type": "METRICS_NOT_CONFIGURED"},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Metrics token not configured. Set METRICS_TOKEN environment variable.",
            )

        metrics_token = request.headers.get("X-Metrics-Token")
        if not hmac.compare_digest(metrics_token or "", expected_token):
            logger.warning(
                "Unauthorized metrics access attempt",
                extra={"security_event": True, "event_type": "METRICS_ACCESS_DENIED"},
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid metrics token",
            )

        return metrics_endpoint()

    if settings.observability_enabled:
        app.add_route("/metrics", protected_metrics)

    return app


app = create_app()
