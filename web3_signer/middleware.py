"""
Custom middleware for the web3 signer service

Includes:
- Request ID tracking for request tracing
- Request metrics
- Security response headers for production
"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from web3_signer.metrics import http_request_duration_seconds, http_requests_total


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to track requests with unique IDs.

    Adds X-Request-ID header to all responses. If the client provides
    X-Request-ID it is reused, otherwise a new UUID is generated. The ID is
    bound to every log line written while the request is handled.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        with logger.contextualize(request_id=request_id):
            logger.debug(f"Request started: {request.method} {request.url.path}")
            try:
                response = await call_next(request)
            except Exception:
                logger.exception(f"Request failed: {request.method} {request.url.path}")
                raise

            response.headers["X-Request-ID"] = request_id
            logger.info(f"{request.method} {request.url.path} - {response.status_code}")
            return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records request counts and latency per route template."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.perf_counter()
        response = await call_next(request)

        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        http_requests_total.labels(
            method=request.method, endpoint=endpoint, status=str(response.status_code)
        ).inc()
        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
            time.perf_counter() - start
        )
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds the hardening headers a browser-facing API should send.

    Enabled in production by default (Settings.security_headers_active).
    """

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
        "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
        "Cross-Origin-Resource-Policy": "same-origin",
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        for header, value in self.HEADERS.items():
            response.headers.setdefault(header, value)
        return response
