"""
===============================================================================
MÓDULO: Logger estructurado (JSON) con contexto de request
===============================================================================

Responsabilidades:
  - Emitir una línea JSON por evento (o texto plano en desarrollo local).
  - Agregar request_id / method / path / user_id desde los ContextVars.
  - Ocultar passwords, tokens y api keys que lleguen como `extra`.

Colaboradores:
  - pizza_service/context.py (ContextVars)
  - crosscutting/config.py (log_level / log_json)

Notas:
  - Las claves de `extra` no pueden pisar atributos del LogRecord
    (`created`, `name`, `message`, ...): logging lanza KeyError.
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Atributos estándar de un LogRecord: todo lo demás vino por `extra`.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "token",
        "jwt",
        "authorization",
        "api_key",
        "factory_api_key",
        "jwt_secret",
        "db_password",
    }
)

REDACTED = "***REDACTADO***"


def _extras(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: REDACTED if key.lower() in _SENSITIVE_KEYS else value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRS
    }


class JSONFormatter(logging.Formatter):
    """LogRecord -> JSON con contexto de request y stacktrace si lo hay."""

    def format(self, record: logging.LogRecord) -> str:
        from ..context import get_context_dict

        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **get_context_dict(),
            **_extras(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(name: str = "pizza-service") -> logging.Logger:
    """Logger global configurado desde Settings (sin duplicar handlers)."""
    from .config import get_settings

    settings = get_settings()
    log = logging.getLogger(name)
    log.setLevel(getattr(logging, settings.log_level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if settings.log_json
            else logging.Formatter("%(levelname)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
