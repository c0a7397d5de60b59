"""
TOTP (Time-based One-Time Password) helpers - RFC 6238

Pure functions over pyotp; nothing here touches storage. The registry in
mfa_service.py decides which secret a code is checked against.
"""

import base64
import io
import re
from datetime import datetime
from typing import Optional, Union

import pyotp
import qrcode

DEFAULT_DIGITS = 6
DEFAULT_INTERVAL = 30
DEFAULT_VALID_WINDOW = 2

# 32 base32 characters = 160 bits of entropy
SECRET_LENGTH = 32

ForTime = Union[int, float, datetime]


def generate_secret() -> str:
    """Generate a fresh random base32 secret."""
    return pyotp.random_base32(length=SECRET_LENGTH)


def build_totp(
    secret: str,
    digits: int = DEFAULT_DIGITS,
    interval: int = DEFAULT_INTERVAL,
) -> pyotp.TOTP:
    return pyotp.TOTP(secret, digits=digits, interval=interval)


def provisioning_uri(
    secret: str,
    account_name: str,
    issuer: str,
    digits: int = DEFAULT_DIGITS,
    interval: int = DEFAULT_INTERVAL,
) -> str:
    """
    Build the otpauth:// URI authenticator apps import.

    Args:
        secret: Base32 secret
        account_name: Label shown in the app (the user identifier)
        issuer: Issuer name shown in the app

    Returns:
        otpauth://totp/... URI
    """
    totp = build_totp(secret, digits=digits, interval=interval)
    return totp.provisioning_uri(name=account_name, issuer_name=issuer)


def render_qr_data_uri(data: str) -> str:
    """
    Generate QR code as data URI

    Args:
        data: Data to encode in QR code

    Returns:
        QR code as data URI (can be used in <img src="">)
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")

    img_base64 = base64.b64encode(buffer.getvalue()).decode()
    return f"data:image/png;base64,{img_base64}"


def is_well_formed_token(token: object, digits: int = DEFAULT_DIGITS) -> bool:
    """True when token is a string of exactly `digits` ASCII decimal digits."""
    return isinstance(token, str) and re.fullmatch(rf"[0-9]{{{digits}}}", token) is not None


def current_code(
    secret: str,
    for_time: Optional[ForTime] = None,
    digits: int = DEFAULT_DIGITS,
    interval: int = DEFAULT_INTERVAL,
) -> str:
    """Code an authenticator app would display for secret at for_time (default now)."""
    totp = build_totp(secret, digits=digits, interval=interval)
    if for_time is None:
        return totp.now()
    return totp.at(for_time)


def verify_code(
    secret: str,
    token: str,
    valid_window: int = DEFAULT_VALID_WINDOW,
    for_time: Optional[ForTime] = None,
    digits: int = DEFAULT_DIGITS,
    interval: int = DEFAULT_INTERVAL,
) -> bool:
    """
    Check token against secret.

    Accepts the code for the current step and for `valid_window` steps on
    either side of it (5 candidates with the default window of 2).
    Malformed tokens are rejected without raising.
    """
    if not secret or not is_well_formed_token(token, digits=digits):
        return False

    totp = build_totp(secret, digits=digits, interval=interval)
    return totp.verify(token, for_time=for_time, valid_window=valid_window)
