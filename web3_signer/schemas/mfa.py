"""
Pydantic schemas for MFA (Multi-Factor Authentication) endpoints
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from web3_signer.services.totp import is_well_formed_token


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# MFA setup schemas

class MfaSetupRequest(_CamelModel):
    """Starts TOTP setup for an identifier"""
    user_identifier: str = Field(
        ...,
        alias="userIdentifier",
        min_length=1,
        description="Email or wallet address"
    )


class MfaSetupResponse(BaseModel):
    """
    MFA setup response

    Contains the TOTP secret and QR code for enrollment.
    """
    model_config = ConfigDict(populate_by_name=True)

    secret: str = Field(
        ...,
        description="Base32-encoded TOTP secret (display to user for manual entry)"
    )
    qr_code_uri: str = Field(
        ...,
        alias="qrCodeUri",
        description="QR code as data URI (can be embedded in <img> tag)"
    )
    message: str = Field(
        default="MFA setup initiated. Please verify with your authenticator app."
    )


class MfaCodeRequest(_CamelModel):
    """
    Code submission, used for both setup confirmation and login
    """
    user_identifier: str = Field(..., alias="userIdentifier", min_length=1)
    token: str = Field(
        ...,
        description="6-digit TOTP code from authenticator app"
    )

    @field_validator("token")
    @classmethod
    def token_must_be_six_digits(cls, v: str) -> str:
        if not is_well_formed_token(v):
            raise ValueError("Token must be a 6-digit string")
        return v


class MfaDisableRequest(_CamelModel):
    user_identifier: str = Field(..., alias="userIdentifier", min_length=1)


class MfaResultResponse(BaseModel):
    """Success response for verify-setup, verify-login and disable"""
    success: bool = True
    message: str


# MFA status schemas

class MfaStatusResponse(BaseModel):
    """
    MFA status response

    has_secret is true while either a permanent or a pending secret exists.
    """
    model_config = ConfigDict(populate_by_name=True)

    enabled: bool
    has_secret: bool = Field(..., alias="hasSecret")
