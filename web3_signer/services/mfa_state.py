"""
MFA state machine as seen by a signed-in session

The state is derived, never stored: given login status, the registry's
enabled flag and whether this session already passed a code check, the
state is always the same. MfaSession wraps the derivation with the calls a
client makes (status lookup, setup, code submission) against any backend
exposing the registry operations - MfaService in-process or SignerClient
over HTTP.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Protocol

from loguru import logger


class MfaState(str, Enum):
    DISABLED = "disabled"
    SETUP = "setup"
    VERIFICATION = "verification"
    ENABLED = "enabled"


class MfaBackend(Protocol):
    def get_status(self, user_identifier: str) -> Any:
        ...

    def generate_secret(self, user_identifier: str) -> Any:
        ...

    def verify_setup_code(self, user_identifier: str, token: str) -> bool:
        ...

    def verify_login_code(self, user_identifier: str, token: str) -> bool:
        ...


def derive_mfa_state(is_logged_in: bool, mfa_enabled: bool, verified_this_session: bool = False) -> MfaState:
    """
    Derive the MFA state for a session.

    Args:
        is_logged_in: Whether the user has signed in
        mfa_enabled: Registry status `enabled` for the user
        verified_this_session: Whether a setup or login code was accepted
            during this session

    Returns:
        DISABLED when not logged in, ENABLED once a code was accepted,
        VERIFICATION when MFA is on but unverified, SETUP otherwise
    """
    if not is_logged_in:
        return MfaState.DISABLED
    if verified_this_session:
        return MfaState.ENABLED
    if mfa_enabled:
        return MfaState.VERIFICATION
    return MfaState.SETUP


class MfaSession:
    """
    Per-session MFA gate.

    Usage:
        session = MfaSession(backend)
        session.login("alice@example.com")   # -> SETUP or VERIFICATION
        session.start_setup()                # only from SETUP
        session.submit_code("123456")        # -> ENABLED on success
    """

    def __init__(self, backend: MfaBackend) -> None:
        self.backend = backend
        self.user_identifier: Optional[str] = None
        self.mfa_enabled = False
        self.verified = False
        self.pending_setup: Any = None

    @property
    def is_logged_in(self) -> bool:
        return self.user_identifier is not None

    @property
    def state(self) -> MfaState:
        return derive_mfa_state(self.is_logged_in, self.mfa_enabled, self.verified)

    @property
    def access_granted(self) -> bool:
        return self.state is MfaState.ENABLED

    def login(self, user_identifier: str) -> MfaState:
        """Start a session for user_identifier and observe registry status."""
        self.user_identifier = user_identifier
        self.verified = False
        self.pending_setup = None
        return self.observe()

    def observe(self) -> MfaState:
        """Re-read registry status. Safe to call repeatedly."""
        if not self.is_logged_in:
            return self.state
        status = self.backend.get_status(self.user_identifier)
        self.mfa_enabled = bool(_field(status, "enabled"))
        return self.state

    def start_setup(self) -> Any:
        """Ask the registry for provisioning material (SETUP state only)."""
        if self.state is not MfaState.SETUP:
            raise RuntimeError(f"MFA setup cannot start from state '{self.state.value}'")
        self.pending_setup = self.backend.generate_secret(self.user_identifier)
        return self.pending_setup

    def submit_code(self, token: str) -> bool:
        """
        Submit a code for the current state.

        SETUP checks against the pending secret (start_setup must have run);
        VERIFICATION checks against the permanent secret. Success moves the
        session to ENABLED.
        """
        state = self.state
        if state is MfaState.SETUP:
            if self.pending_setup is None:
                raise RuntimeError("Call start_setup() before submitting a setup code")
            verified = self.backend.verify_setup_code(self.user_identifier, token)
            if verified:
                self.mfa_enabled = True
                self.pending_setup = None
        elif state is MfaState.VERIFICATION:
            verified = self.backend.verify_login_code(self.user_identifier, token)
        else:
            raise RuntimeError(f"No code is expected in state '{state.value}'")

        if verified:
            self.verified = True
        logger.debug(f"MFA code submitted in state {state.value}: {'accepted' if verified else 'rejected'}")
        return verified

    def logout(self) -> None:
        self.user_identifier = None
        self.mfa_enabled = False
        self.verified = False
        self.pending_setup = None


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name)
