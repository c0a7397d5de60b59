"""
API dependencies shared by the v1 routers
"""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from web3_signer.core.config import Settings, get_settings
from web3_signer.services.mfa_service import MfaService

# Settings the shared limiter currently follows; create_app() replaces them
_limit_settings: Settings = get_settings()


def default_rate_limit() -> str:
    return _limit_settings.rate_limit_default


def mfa_verify_rate_limit() -> str:
    return _limit_settings.rate_limit_mfa_verify


# Rate limiter, keyed by client address
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[default_rate_limit],
    enabled=_limit_settings.rate_limit_enabled,
)


def configure_limiter(settings: Settings) -> Limiter:
    """
    Point the shared limiter at an application's settings

    Limits are read per request, so a later call takes effect immediately.
    """
    global _limit_settings
    _limit_settings = settings
    limiter.enabled = settings.rate_limit_enabled
    return limiter


def get_mfa_service(request: Request) -> MfaService:
    """
    Get the MFA registry bound to this application

    Args:
        request: Incoming request

    Returns:
        MfaService instance created in create_app()
    """
    return request.app.state.mfa_service
