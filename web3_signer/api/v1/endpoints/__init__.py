from web3_signer.api.v1.endpoints import mfa, verification

__all__ = ["mfa", "verification"]
