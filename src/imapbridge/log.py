from __future__ import annotations

import re
import sys
from typing import Any

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

_SECRET_KEY_RE = re.compile(r"(pass(word)?|token|secret|authorization|cookie|key)", re.IGNORECASE)


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())


def scrub_secrets(value: Any) -> Any:
    """
    Recursively replace values under password/token-like keys with '[REDACTED]'.
    """
    if isinstance(value, (list, tuple)):
        return [scrub_secrets(v) for v in value]
    if isinstance(value, dict):
        return {
            k: "[REDACTED]" if _SECRET_KEY_RE.search(str(k)) else scrub_secrets(v)
            for k, v in value.items()
        }
    return value
