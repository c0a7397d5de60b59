"""
HTTP client for the web3 signer service.

Wraps every route and satisfies the backend interface MfaSession expects,
so the same state machine runs in-process against MfaService or remotely
against a deployed service:

    with SignerClient("http://localhost:3000") as client:
        result = client.verify_signature("Hello, Web3!", signature)
        session = client.mfa_session()
        session.login("alice@example.com")
"""

from typing import Any, Dict, Optional

import httpx

from web3_signer.services.mfa_state import MfaSession


class SignerAPIError(Exception):
    """Raised when an API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Optional[dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class SignerClient:
    """HTTP client for the signature verification and MFA API."""

    def __init__(
        self,
        base_url: str = "http://localhost:3000",
        api_prefix: str = "/api/v1",
        timeout: float = 10.0,
        http_client: Optional[httpx.Client] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the service (ignored when http_client is given)
            api_prefix: Route prefix the service was configured with
            timeout: Request timeout in seconds
            http_client: Pre-built httpx client (e.g. FastAPI's TestClient)
        """
        self.api_prefix = api_prefix.rstrip("/")
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "SignerClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self.client.request(method, f"{self.api_prefix}{path}", **kwargs)
        except httpx.TimeoutException as e:
            raise SignerAPIError(f"Request timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise SignerAPIError(f"Request failed: {method} {path}: {e}") from e

    @staticmethod
    def _body(response: httpx.Response) -> Dict[str, Any]:
        try:
            return response.json()
        except ValueError:
            return {"error": response.text}

    def _raise_for_error(self, response: httpx.Response) -> Dict[str, Any]:
        body = self._body(response)
        if response.status_code >= 400:
            raise SignerAPIError(
                body.get("error", f"HTTP {response.status_code}"),
                status_code=response.status_code,
                response=body,
            )
        return body

    def _code_check(self, path: str, user_identifier: str, token: str) -> bool:
        response = self._request("POST", path, json={"userIdentifier": user_identifier, "token": token})
        if response.status_code == 401:
            return False
        return bool(self._raise_for_error(response).get("success"))

    def verify_signature(self, message: str, signature: str) -> Dict[str, Any]:
        """
        Recover the signer of a message.

        Returns:
            {"isValid": bool, "signer": str, "originalMessage": str}
        """
        response = self._request("POST", "/verify-signature", json={"message": message, "signature": signature})
        return self._raise_for_error(response)

    def generate_secret(self, user_identifier: str) -> Dict[str, Any]:
        """Start MFA setup; returns {"secret", "qrCodeUri", "message"}."""
        response = self._request("POST", "/mfa/setup", json={"userIdentifier": user_identifier})
        return self._raise_for_error(response)

    def verify_setup_code(self, user_identifier: str, token: str) -> bool:
        return self._code_check("/mfa/verify-setup", user_identifier, token)

    def verify_login_code(self, user_identifier: str, token: str) -> bool:
        return self._code_check("/mfa/verify-login", user_identifier, token)

    def disable(self, user_identifier: str) -> bool:
        response = self._request("POST", "/mfa/disable", json={"userIdentifier": user_identifier})
        return bool(self._raise_for_error(response).get("success"))

    def get_status(self, user_identifier: str) -> Dict[str, Any]:
        """Returns {"enabled": bool, "hasSecret": bool}."""
        response = self._request("GET", "/mfa/status", params={"userIdentifier": user_identifier})
        return self._raise_for_error(response)

    def mfa_session(self) -> MfaSession:
        """New MFA state machine driven through this client."""
        return MfaSession(self)
