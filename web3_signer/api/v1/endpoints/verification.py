"""
Signature verification endpoint
"""

from fastapi import APIRouter

from web3_signer.exceptions import InternalServiceError
from web3_signer.schemas.verification import VerifySignatureRequest, VerifySignatureResponse
from web3_signer.services import verification_service


router = APIRouter()


@router.post("/verify-signature", response_model=VerifySignatureResponse)
async def verify_signature(request_data: VerifySignatureRequest):
    """
    Recover the address that signed a message

    **Request Body:**
    - message: The original message
    - signature: personal_sign signature over the message

    **Returns:**
    - isValid: Whether an address could be recovered
    - signer: Checksummed signer address ("" when invalid)
    - originalMessage: The message as submitted

    A malformed signature is not an error: it yields `isValid: false`.
    Compare `signer` with the address you expect; this endpoint does not.

    **Errors:**
    - 400: message or signature missing or not a string
    """
    try:
        result = verification_service.verify_signature(request_data.message, request_data.signature)
    except Exception as e:
        raise InternalServiceError(
            "An error occurred during signature verification",
            details=str(e),
        ) from e

    return VerifySignatureResponse(
        is_valid=result.is_valid,
        signer=result.signer,
        original_message=result.original_message,
    )
