"""
Integration tests for POST /api/v1/verify-signature
"""
import pytest
from eth_account.messages import encode_defunct

URL = "/api/v1/verify-signature"
MESSAGE = "Hello, Web3!"


def sign(account, message: str) -> str:
    signed = account.sign_message(encode_defunct(text=message))
    return "0x" + bytes(signed.signature).hex()


@pytest.mark.integration
class TestVerifySignature:
    def test_valid_signature(self, client, test_account):
        response = client.post(URL, json={"message": MESSAGE, "signature": sign(test_account, MESSAGE)})

        assert response.status_code == 200
        assert response.json() == {
            "isValid": True,
            "signer": test_account.address,
            "originalMessage": MESSAGE,
        }

    def test_signer_of_other_message_differs(self, client, test_account):
        signature = sign(test_account, "Some other message")

        response = client.post(URL, json={"message": MESSAGE, "signature": signature})

        assert response.status_code == 200
        data = response.json()
        assert data["isValid"] is True
        assert data["signer"] != test_account.address

    def test_malformed_signature_is_not_an_error(self, client):
        response = client.post(URL, json={"message": MESSAGE, "signature": "0xinvalid"})

        assert response.status_code == 200
        assert response.json() == {"isValid": False, "signer": "", "originalMessage": MESSAGE}

    @pytest.mark.parametrize(
        "payload,missing",
        [
            ({"signature": "0xabc"}, "message"),
            ({"message": MESSAGE}, "signature"),
            ({"message": "", "signature": "0xabc"}, "message"),
        ],
    )
    def test_missing_fields(self, client, payload, missing):
        response = client.post(URL, json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == f"Missing required fields: {missing}"

    def test_both_fields_missing(self, client):
        response = client.post(URL, json={})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields: message, signature"

    def test_non_string_fields(self, client):
        response = client.post(URL, json={"message": 123, "signature": "0xabc"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid field types: message must be strings"

    def test_service_failure_maps_to_500(self, client, monkeypatch):
        from web3_signer.services import verification_service

        def explode(message, signature):
            raise RuntimeError("boom")

        monkeypatch.setattr(verification_service, "verify_signature", explode)

        response = client.post(URL, json={"message": MESSAGE, "signature": "0xabc"})

        assert response.status_code == 500
        assert response.json() == {
            "error": "An error occurred during signature verification",
            "details": "boom",
        }
