"""
Pydantic schemas for signature verification
"""

from pydantic import BaseModel, ConfigDict, Field


class VerifySignatureRequest(BaseModel):
    """Message and the signature produced over it by a wallet"""
    message: str = Field(..., min_length=1, description="The original message that was signed")
    signature: str = Field(..., min_length=1, description="Hex-encoded signature (0x-prefixed)")


class VerifySignatureResponse(BaseModel):
    """
    Signature verification response

    `signer` is the recovered checksummed address, or "" when invalid.
    """
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(..., alias="isValid")
    signer: str
    original_message: str = Field(..., alias="originalMessage")
