"""
Unit tests for signature verification
"""
import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from web3_signer.services.verification_service import SignatureVerificationResult, verify_signature

MESSAGE = "Hello, Web3!"


def sign(account, message: str) -> str:
    signed = Account.sign_message(encode_defunct(text=message), private_key=account.key)
    return "0x" + bytes(signed.signature).hex()


@pytest.mark.unit
def test_valid_signature_recovers_signer(test_account):
    """A personal_sign signature recovers the checksummed address of the key"""
    result = verify_signature(MESSAGE, sign(test_account, MESSAGE))

    assert isinstance(result, SignatureVerificationResult)
    assert result.is_valid is True
    assert result.signer == test_account.address
    assert result.signer == "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
    assert result.original_message == MESSAGE


@pytest.mark.unit
def test_signature_without_hex_prefix_is_accepted(test_account):
    signature = sign(test_account, MESSAGE)[2:]

    result = verify_signature(MESSAGE, signature)

    assert result.is_valid is True
    assert result.signer == test_account.address


@pytest.mark.unit
def test_verification_is_deterministic(test_account):
    signature = sign(test_account, MESSAGE)

    signers = {verify_signature(MESSAGE, signature).signer for _ in range(5)}

    assert signers == {test_account.address}


@pytest.mark.unit
def test_unicode_message(test_account):
    message = "Sign-in nonce: 42 ✓ été"

    result = verify_signature(message, sign(test_account, message))

    assert result.is_valid is True
    assert result.signer == test_account.address


@pytest.mark.unit
def test_different_message_recovers_different_address(test_account):
    """Verification answers who signed, it does not compare against an expected signer"""
    signature = sign(test_account, "Some other message")

    result = verify_signature(MESSAGE, signature)

    assert result.signer != test_account.address


@pytest.mark.unit
@pytest.mark.parametrize(
    "signature",
    [
        "0xinvalid",
        "",
        "0x",
        "0x1234",
        "zz" * 65,
        "0x" + "ab" * 64,  # one byte short
        "0x" + "ab" * 66,  # one byte long
    ],
)
def test_malformed_signatures_are_invalid_not_errors(signature):
    result = verify_signature(MESSAGE, signature)

    assert result.is_valid is False
    assert result.signer == ""
    assert result.original_message == MESSAGE


@pytest.mark.unit
def test_truncated_signature_is_invalid(test_account):
    signature = sign(test_account, MESSAGE)[:-10]

    result = verify_signature(MESSAGE, signature)

    assert result.is_valid is False
    assert result.signer == ""


@pytest.mark.unit
def test_bad_recovery_id_is_invalid(test_account):
    signature = sign(test_account, MESSAGE)
    bad_v = signature[:-2] + "05"

    result = verify_signature(MESSAGE, bad_v)

    assert result.is_valid is False
    assert result.signer == ""
