"""
MFA (Multi-Factor Authentication) endpoints

The userIdentifier in the request is trusted as-is; these routes do not
check that the caller owns it.
"""

from fastapi import APIRouter, Depends, Query, Request

from web3_signer.api.dependencies import get_mfa_service, limiter, mfa_verify_rate_limit
from web3_signer.exceptions import InternalServiceError, MfaSetupError, VerificationFailedError
from web3_signer.schemas.mfa import (
    MfaCodeRequest,
    MfaDisableRequest,
    MfaResultResponse,
    MfaSetupRequest,
    MfaSetupResponse,
    MfaStatusResponse,
)
from web3_signer.services.mfa_service import MfaService


router = APIRouter()


@router.post("/setup", response_model=MfaSetupResponse)
async def setup_mfa(
    request_data: MfaSetupRequest,
    mfa_service: MfaService = Depends(get_mfa_service)
):
    """
    Generate a TOTP secret and QR code

    Scan the QR code with an authenticator app (Google Authenticator, Authy,
    Microsoft Authenticator, etc.), then call `/mfa/verify-setup` with a code.
    Calling this again replaces the pending secret.

    **Errors:**
    - 400: userIdentifier missing
    - 500: secret could not be generated
    """
    try:
        setup = mfa_service.generate_secret(request_data.user_identifier)
    except MfaSetupError as e:
        raise InternalServiceError("Failed to setup MFA", details=str(e)) from e

    return MfaSetupResponse(secret=setup.secret, qr_code_uri=setup.qr_code_uri)


@router.post("/verify-setup", response_model=MfaResultResponse)
@limiter.limit(mfa_verify_rate_limit)
async def verify_setup(
    request: Request,
    request_data: MfaCodeRequest,
    mfa_service: MfaService = Depends(get_mfa_service)
):
    """
    Confirm setup with a code from the authenticator app and enable MFA

    **Errors:**
    - 400: Missing fields or token not 6 digits
    - 401: Code rejected (or no setup in progress)
    """
    if not mfa_service.verify_setup_code(request_data.user_identifier, request_data.token):
        raise VerificationFailedError()

    return MfaResultResponse(message="MFA enabled successfully")


@router.post("/verify-login", response_model=MfaResultResponse)
@limiter.limit(mfa_verify_rate_limit)
async def verify_login(
    request: Request,
    request_data: MfaCodeRequest,
    mfa_service: MfaService = Depends(get_mfa_service)
):
    """
    Verify a login code against the enabled secret

    **Errors:**
    - 400: Missing fields or token not 6 digits
    - 401: Code rejected or MFA not enabled
    """
    if not mfa_service.verify_login_code(request_data.user_identifier, request_data.token):
        raise VerificationFailedError()

    return MfaResultResponse(message="MFA verification successful")


@router.post("/disable", response_model=MfaResultResponse)
async def disable_mfa(
    request_data: MfaDisableRequest,
    mfa_service: MfaService = Depends(get_mfa_service)
):
    """
    Remove MFA for an identifier (succeeds even if none was configured)

    **Errors:**
    - 400: userIdentifier missing
    - 500: storage failure
    """
    if not mfa_service.disable(request_data.user_identifier):
        raise InternalServiceError("Failed to disable MFA")

    return MfaResultResponse(message="MFA disabled successfully")


@router.get("/status", response_model=MfaStatusResponse)
async def get_mfa_status(
    user_identifier: str = Query(..., alias="userIdentifier", min_length=1),
    mfa_service: MfaService = Depends(get_mfa_service)
):
    """
    Get MFA status

    **Returns:**
    - enabled: Whether a confirmed secret gates login
    - hasSecret: Whether a confirmed or pending secret exists
    """
    status = mfa_service.get_status(user_identifier)
    return MfaStatusResponse(enabled=status.enabled, has_secret=status.has_secret)
