"""Run the service with uvicorn: python -m web3_signer"""

import uvicorn

from web3_signer.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "web3_signer.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
