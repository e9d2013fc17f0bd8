"""Logging setup driven by ObservabilityConfig.

Modules log through ``logging.getLogger(__name__)`` and pass context in
``extra={...}``. With ``structured=True`` those extra fields are appended
to each line as ``key=value`` pairs so they survive plain-text sinks.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import ObservabilityConfig, get_config

# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED = frozenset(
    vars(logging.LogRecord("x", logging.INFO, "x", 0, "x", None, None))
) | {"message", "asctime"}


class ExtraFieldsFormatter(logging.Formatter):
    """Formatter that appends ``extra`` fields to the message."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        extras = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED and not key.startswith("_")
        }
        if not extras:
            return base
        pairs = " ".join(f"{key}={value!r}" for key, value in sorted(extras.items()))
        return f"{base} | {pairs}"


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Configure the ``carpool_map`` logger hierarchy.

    Safe to call more than once; the previous handler is replaced.
    """
    config = config or get_config().observability

    formatter: logging.Formatter
    if config.structured:
        formatter = ExtraFieldsFormatter(config.format)
    else:
        formatter = logging.Formatter(config.format)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    logger = logging.getLogger("carpool_map")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(config.level.upper())
