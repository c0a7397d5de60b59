"""
Main FastAPI application for the web3 signer service
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from web3_signer.api.dependencies import configure_limiter, limiter
from web3_signer.api.v1.endpoints import mfa, verification
from web3_signer.core.config import Settings, get_settings
from web3_signer.core.mfa_store import MfaStore, build_store
from web3_signer.exceptions import BadRequestError, BaseAppException
from web3_signer.logging_config import configure_logging
from web3_signer.metrics import app_info
from web3_signer.middleware import MetricsMiddleware, RequestIDMiddleware, SecurityHeadersMiddleware
from web3_signer.services.mfa_service import MfaService


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events
    """
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    yield

    logger.info("Shutting down...")
    close = getattr(app.state.mfa_service.store, "close", None)
    if close is not None:
        close()


def describe_validation_error(exc: RequestValidationError) -> tuple:
    """
    Turn pydantic errors into the service's (error, details) pair.

    Missing or empty fields are reported together, then wrongly typed
    fields, then the first validator message.
    """
    missing_body, missing_query, wrong_type, messages = [], [], [], []

    for err in exc.errors():
        loc = err.get("loc", ())
        source = loc[0] if loc else "body"
        field = ".".join(str(part) for part in loc[1:]) or str(source)
        err_type = err.get("type", "")
        msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        messages.append(f"{field}: {msg}")

        empty = err_type == "string_too_short" and (err.get("ctx") or {}).get("min_length") == 1
        if err_type == "missing" or empty:
            (missing_query if source == "query" else missing_body).append(field)
        elif err_type == "string_type":
            wrong_type.append(field)

    details = "; ".join(messages)
    if missing_query:
        return f"Missing required query parameter: {', '.join(missing_query)}", details
    if missing_body:
        return f"Missing required fields: {', '.join(missing_body)}", details
    if wrong_type:
        return f"Invalid field types: {', '.join(wrong_type)} must be strings", details
    if messages:
        return messages[0].split(": ", 1)[-1], details
    return "Invalid request", details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        error = BadRequestError(*describe_validation_error(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_body())

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.detail} ({exc.details})")
        return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def create_app(settings: Optional[Settings] = None, store: Optional[MfaStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment)
        store: MFA store to use (defaults to the backend named in settings)
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Web3 Signer - signature verification and TOTP second factor",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.mfa_service = MfaService(
        store=store if store is not None else build_store(settings),
        settings=settings,
    )

    # Rate limiter state and exception handler
    app.state.limiter = configure_limiter(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    # Middleware (last added runs first)
    app.add_middleware(SlowAPIMiddleware)
    if settings.security_headers_active:
        app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)

    app_info.info({"version": settings.version, "environment": settings.environment})

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "status": "ok",
            "message": "Web3 Signature Verifier API",
            "version": settings.version,
        }

    @app.get("/health")
    @limiter.exempt
    async def health_check():
        """Health check endpoint"""
        store_ok = app.state.mfa_service.store.ping()
        return {
            "status": "healthy" if store_ok else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": {
                "mfa_store": "healthy" if store_ok else "unhealthy",
            },
        }

    @app.get("/metrics")
    @limiter.exempt
    async def metrics():
        """Prometheus metrics endpoint"""
        return PlainTextResponse(generate_latest().decode(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(verification.router, prefix=settings.api_prefix, tags=["verification"])
    app.include_router(mfa.router, prefix=f"{settings.api_prefix}/mfa", tags=["mfa"])

    return app


app = create_app()
