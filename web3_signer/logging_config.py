"""
Loguru configuration with PII redaction
"""

import os
import re
import sys

from loguru import logger

from web3_signer.core.config import Settings

_EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
# 64+ hex chars covers private keys and signatures; 40-char addresses stay readable
_LONG_HEX_RE = re.compile(r"\b(?:0x)?[a-fA-F0-9]{64,}\b")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def sanitize_pii(record: dict) -> bool:
    """
    Sanitize personally identifiable information from log messages.
    Redacts: email addresses and long hex strings (keys, signatures).
    """
    message = record["message"]
    message = _EMAIL_RE.sub("[EMAIL_REDACTED]", message)
    message = _LONG_HEX_RE.sub("[HEX_REDACTED]", message)
    record["message"] = message
    return True


def configure_logging(settings: Settings) -> None:
    """Replace loguru's default handler with the service sinks."""
    logger.remove()

    logger.add(
        sink=sys.stderr,
        format=CONSOLE_FORMAT,
        filter=sanitize_pii,
        colorize=True,
        level=settings.log_level,
    )

    if settings.log_dir:
        os.makedirs(settings.log_dir, exist_ok=True)
        logger.add(
            sink=os.path.join(settings.log_dir, f"{settings.app_name}.log"),
            format=FILE_FORMAT,
            filter=sanitize_pii,
            rotation="100 MB",
            retention="7 days",
            compression="zip",
            enqueue=True,
            level="DEBUG",
        )
