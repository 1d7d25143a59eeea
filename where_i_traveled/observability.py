"""Logging setup.

Modules log through ``logging.getLogger(__name__)`` and attach context
with ``extra={...}``. This module installs the root handler once, either
with the configured text format or, when structured, through structlog's
ProcessorFormatter so each record becomes one JSON object carrying those
extra fields.
"""

from __future__ import annotations

import logging
from typing import Optional

from structlog import processors, stdlib

from .config import ObservabilityConfig, get_config

_installed_handler: Optional[logging.Handler] = None


def _json_formatter() -> logging.Formatter:
    return stdlib.ProcessorFormatter(
        processor=processors.JSONRenderer(),
        foreign_pre_chain=[
            stdlib.add_logger_name,
            stdlib.add_log_level,
            processors.TimeStamper(fmt="iso"),
            stdlib.ExtraAdder(),
            processors.dict_tracebacks,
        ],
    )


def configure_logging(
    config: Optional[ObservabilityConfig] = None,
    level: Optional[str] = None,
) -> None:
    """Install the root log handler.

    Args:
        config: Observability settings (defaults to the app config).
        level: Optional level override (e.g., from a --verbose flag).
    """
    global _installed_handler

    config = config or get_config().observability
    handler = logging.StreamHandler()
    if config.structured:
        handler.setFormatter(_json_formatter())
    else:
        handler.setFormatter(logging.Formatter(config.format))

    root = logging.getLogger()
    # Replace only our own handler; others (e.g. pytest's) stay attached.
    if _installed_handler is not None:
        root.removeHandler(_installed_handler)
    root.addHandler(handler)
    root.setLevel((level or config.level).upper())
    _installed_handler = handler


def reset_logging() -> None:
    """Detach the handler installed by configure_logging(), if any."""
    global _installed_handler

    if _installed_handler is not None:
        logging.getLogger().removeHandler(_installed_handler)
        _installed_handler = None
