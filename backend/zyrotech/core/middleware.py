"""
Middleware Module

This module provides the middleware components for:
- Security headers injection
- Request/response logging
- Correlation ID tracking
- Prometheus metrics

Each middleware is configurable and integrated with the logging system.
"""

import time
import uuid
from typing import Dict

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from zyrotech.core.logging import correlation_id, get_logger
from zyrotech.core.settings import settings
from zyrotech.monitoring.prometheus import (
    endpoint_label,
    get_http_request_duration_seconds,
    get_http_requests_in_progress,
    get_http_requests_total,
)

# Initialize logger
logger = get_logger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to inject security headers into responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        headers = {
            "Strict-Transport-Security": f"max-age={settings.security.HSTS_MAX_AGE}; includeSubDomains",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "X-XSS-Protection": "1; mode=block",
            "Content-Security-Policy": (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline'; "
                "style-src 'self' 'unsafe-inline'; "
                "img-src 'self' data: https:; "
                "connect-src 'self';"
            ),
            "Referrer-Policy": "strict-origin-when-cross-origin",
        }

        for header_name, header_value in headers.items():
            response.headers.setdefault(header_name, header_value)

        return response


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Middleware to handle correlation ID for request tracing."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.header_name = "X-Correlation-ID"

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        correlation_id_value = request.headers.get(
            self.header_name,
            str(uuid.uuid4())
        )

        token = correlation_id.set(correlation_id_value)
        request.state.correlation_id = correlation_id_value

        try:
            response = await call_next(request)
        finally:
            correlation_id.reset(token)

        response.headers[self.header_name] = correlation_id_value
        return response


# Probes and scrapes are not worth a log line or a metric sample
UNTRACKED_PATHS = ("/health", "/metrics")


def _is_untracked(path: str) -> bool:
    return any(path == p or path.startswith(p + "/") for p in UNTRACKED_PATHS)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with its outcome and timing."""

    @staticmethod
    def _sanitize_headers(headers: Dict[str, str]) -> Dict[str, str]:
        sanitized = headers.copy()
        for field in ("authorization", "cookie"):
            if field in sanitized:
                sanitized[field] = "***REDACTED***"
        return sanitized

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        if _is_untracked(request.url.path):
            return await call_next(request)

        start_time = time.perf_counter()
        logger.debug(
            "Incoming request",
            extra={
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "client_ip": request.client.host if request.client else None,
                "headers": self._sanitize_headers(dict(request.headers))
            }
        )

        response = await call_next(request)

        # 4xx are expected client outcomes; only server errors are warnings
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start_time) * 1000, 2)
            }
        )
        return response


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Request count, latency and in-flight gauge, labelled by route template."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        if _is_untracked(request.url.path):
            return await call_next(request)

        get_http_requests_in_progress().inc()
        start_time = time.perf_counter()
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration = time.perf_counter() - start_time
            endpoint = endpoint_label(request)
            get_http_requests_total().labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            get_http_request_duration_seconds().labels(
                method=request.method,
                endpoint=endpoint
            ).observe(duration)
            get_http_requests_in_progress().dec()


def add_middlewares(app: FastAPI) -> None:
    """
    Add all middleware to the FastAPI application in the correct order.

    Args:
        app: FastAPI application instance
    """
    # Last added = first executed
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationIDMiddleware)
    if settings.security.SECURITY_HEADERS:
        app.add_middleware(SecurityHeadersMiddleware)

    logger.info("All middleware components registered successfully")
