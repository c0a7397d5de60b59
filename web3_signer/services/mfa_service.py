"""
MFA Service - TOTP registry keyed by user identifier

Lifecycle of a record:
    generate_secret   -> writes temp_secret (keeps secret/enabled as they were)
    verify_setup_code -> on success promotes temp_secret to secret, enabled=True
    verify_login_code -> checks the permanent secret only, never mutates
    disable           -> removes the whole record

Code checks always answer with a bool. Store failures are logged with a
traceback and degrade to False so routes have one contract to handle.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from web3_signer.core.config import Settings, get_settings
from web3_signer.core.mfa_store import InMemoryMfaStore, MfaRecord, MfaStore
from web3_signer.exceptions import MfaSetupError, MfaStoreError
from web3_signer.metrics import mfa_operations_total
from web3_signer.services import totp


@dataclass(frozen=True)
class MfaSetup:
    """Provisioning material returned by generate_secret."""

    secret: str
    provisioning_uri: str
    qr_code_uri: str


@dataclass(frozen=True)
class MfaStatus:
    enabled: bool
    has_secret: bool


class MfaService:
    """Service for MFA/TOTP operations"""

    def __init__(self, store: Optional[MfaStore] = None, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.store = store if store is not None else InMemoryMfaStore()

    def _verify(self, secret: str, token: str) -> bool:
        return totp.verify_code(
            secret,
            token,
            valid_window=self.settings.mfa_valid_window,
            digits=self.settings.mfa_digits,
            interval=self.settings.mfa_interval_seconds,
        )

    def generate_secret(self, user_identifier: str) -> MfaSetup:
        """
        Start MFA setup for a user

        Issues a fresh secret as the pending temp secret, replacing any
        earlier pending one. An already-enabled permanent secret stays in
        force until the new one is confirmed.

        Args:
            user_identifier: Email or wallet address

        Returns:
            MfaSetup with the secret, otpauth URI and QR code data URI

        Raises:
            MfaSetupError: If the secret could not be stored or rendered
        """
        try:
            secret = totp.generate_secret()
            uri = totp.provisioning_uri(
                secret,
                account_name=user_identifier,
                issuer=self.settings.mfa_issuer,
                digits=self.settings.mfa_digits,
                interval=self.settings.mfa_interval_seconds,
            )
            qr_code_uri = totp.render_qr_data_uri(uri)

            existing = self.store.get(user_identifier)
            self.store.set(
                user_identifier,
                MfaRecord(
                    secret=existing.secret if existing else "",
                    enabled=existing.enabled if existing else False,
                    temp_secret=secret,
                ),
            )
        except Exception as exc:
            logger.exception(f"Failed to generate MFA secret for user: {user_identifier}")
            mfa_operations_total.labels(operation="setup", result="error").inc()
            raise MfaSetupError("Failed to generate MFA secret") from exc

        logger.info(f"MFA secret generated for user: {user_identifier}")
        mfa_operations_total.labels(operation="setup", result="success").inc()
        return MfaSetup(secret=secret, provisioning_uri=uri, qr_code_uri=qr_code_uri)

    def verify_setup_code(self, user_identifier: str, token: str) -> bool:
        """
        Confirm setup with a code generated from the pending temp secret

        On success the temp secret becomes the permanent secret and MFA is
        enabled. On failure the record is left untouched.

        Returns:
            True if the code matched and MFA is now enabled
        """
        try:
            record = self.store.get(user_identifier)
            if record is None or not record.temp_secret:
                logger.warning(f"No temporary MFA secret found for user: {user_identifier}")
                mfa_operations_total.labels(operation="verify_setup", result="rejected").inc()
                return False

            if not self._verify(record.temp_secret, token):
                logger.info(f"MFA setup verification failed for user: {user_identifier}")
                mfa_operations_total.labels(operation="verify_setup", result="rejected").inc()
                return False

            self.store.set(
                user_identifier,
                MfaRecord(secret=record.temp_secret, temp_secret=None, enabled=True),
            )
        except Exception:
            logger.exception(f"Failed to verify MFA setup for user: {user_identifier}")
            mfa_operations_total.labels(operation="verify_setup", result="error").inc()
            return False

        logger.info(f"MFA enabled for user: {user_identifier}")
        mfa_operations_total.labels(operation="verify_setup", result="success").inc()
        return True

    def verify_login_code(self, user_identifier: str, token: str) -> bool:
        """
        Check a login code against the permanent secret

        Requires MFA to be enabled; a pending temp secret is never consulted.
        """
        try:
            record = self.store.get(user_identifier)
            if record is None or not record.enabled or not record.secret:
                logger.warning(f"MFA not enabled for user: {user_identifier}")
                mfa_operations_total.labels(operation="verify_login", result="rejected").inc()
                return False

            verified = self._verify(record.secret, token)
        except Exception:
            logger.exception(f"Failed to verify MFA login for user: {user_identifier}")
            mfa_operations_total.labels(operation="verify_login", result="error").inc()
            return False

        logger.info(
            f"MFA login verification for user {user_identifier}: {'success' if verified else 'failed'}"
        )
        mfa_operations_total.labels(
            operation="verify_login", result="success" if verified else "rejected"
        ).inc()
        return verified

    def disable(self, user_identifier: str) -> bool:
        """
        Remove all MFA state for a user

        Idempotent: disabling an unknown identifier also reports success.

        Returns:
            False only if the store failed
        """
        try:
            self.store.delete(user_identifier)
        except Exception:
            logger.exception(f"Failed to disable MFA for user: {user_identifier}")
            mfa_operations_total.labels(operation="disable", result="error").inc()
            return False

        logger.info(f"MFA disabled for user: {user_identifier}")
        mfa_operations_total.labels(operation="disable", result="success").inc()
        return True

    def get_status(self, user_identifier: str) -> MfaStatus:
        """Read-only status; a failing store reads as no MFA configured."""
        try:
            record = self.store.get(user_identifier)
        except MfaStoreError:
            logger.exception(f"Failed to read MFA status for user: {user_identifier}")
            return MfaStatus(enabled=False, has_secret=False)

        if record is None:
            return MfaStatus(enabled=False, has_secret=False)
        return MfaStatus(enabled=record.enabled, has_secret=record.has_secret)

    def is_enabled(self, user_identifier: str) -> bool:
        return self.get_status(user_identifier).enabled
