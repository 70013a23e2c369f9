"""Inicialización de logging.

Por qué centralizado:
- Los módulos solo hacen `logging.getLogger(__name__)`; el handler y el
  formato se configuran una vez desde el entrypoint (CLI).
- El formatter tolera registros sin los campos `extra` habituales.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from core.config import AppSettings

_INITIALIZED: bool = False


class SafeExtraFormatter(logging.Formatter):
    """Formatter that tolerates missing extra fields by injecting defaults."""

    DEFAULTS: dict[str, Any] = {
        "resource": "-",
        "item": "-",
        "status": "-",
        "duration_ms": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def init_logging(level: str | None = None, *, settings: AppSettings | None = None) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    if level is None:
        level = (settings or AppSettings()).log_level
    log_level = getattr(logging, level.upper(), logging.WARNING)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        # stderr: stdout queda libre para el JSON de salida.
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(log_level)
        handler.setFormatter(
            SafeExtraFormatter(
                fmt=(
                    "%(asctime)s %(levelname)s %(name)s %(message)s "
                    "resource=%(resource)s item=%(item)s status=%(status)s "
                    "duration_ms=%(duration_ms)s"
                )
            )
        )
        root_logger.addHandler(handler)

    _INITIALIZED = True
