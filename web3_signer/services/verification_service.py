"""
Signature verification - recovers who signed a message

Uses the personal_sign (EIP-191) convention: the message is prefixed with
"\\x19Ethereum Signed Message:\\n" and its byte length, hashed with
keccak-256, and the signer's public key is recovered from the secp256k1
signature. Callers compare the recovered address with the one they expect.
"""

from dataclasses import dataclass

from eth_account import Account
from eth_account.messages import encode_defunct
from loguru import logger

from web3_signer.metrics import signature_verifications_total


@dataclass(frozen=True)
class SignatureVerificationResult:
    """Outcome of a signature check; built fresh per request."""

    is_valid: bool
    signer: str
    original_message: str


def recover_signer(message: str, signature: str) -> str:
    """
    Recover the checksummed address that signed message.

    Raises whatever eth-account raises for malformed or unrecoverable
    signatures.
    """
    signable = encode_defunct(text=message)
    return Account.recover_message(signable, signature=signature)


def verify_signature(message: str, signature: str) -> SignatureVerificationResult:
    """
    Verify a personal_sign signature.

    Args:
        message: The original message that was signed
        signature: Hex-encoded 65-byte signature (0x-prefixed)

    Returns:
        SignatureVerificationResult. A signature that cannot be decoded or
        recovered yields is_valid=False and an empty signer; nothing raises.
    """
    try:
        signer = recover_signer(message, signature)
    except Exception as exc:
        logger.warning(f"Signature verification failed: {type(exc).__name__}: {exc}")
        signature_verifications_total.labels(result="invalid").inc()
        return SignatureVerificationResult(
            is_valid=False,
            signer="",
            original_message=message,
        )

    logger.info(f"Signature verified successfully. Signer: {signer}")
    signature_verifications_total.labels(result="valid").inc()
    return SignatureVerificationResult(
        is_valid=True,
        signer=signer,
        original_message=message,
    )
