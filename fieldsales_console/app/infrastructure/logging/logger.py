import json
import logging
from datetime import datetime, timezone
from typing import Any

from fieldsales_console.app.core.config import settings

_REDACTED_KEYS = {"password", "access_token", "refresh_token", "token", "apikey"}
_WARNING_OUTCOMES = {"error", "denied", "stale"}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(settings.LOG_LEVEL.upper())
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_action(
    logger: logging.Logger,
    module: str,
    action: str,
    actor_role: str | None,
    actor_id: str | None,
    outcome: str,
    **extra: Any,
) -> None:
    level = logging.WARNING if outcome in _WARNING_OUTCOMES else logging.INFO
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "actor_role": actor_role,
        "actor_id": actor_id,
        "outcome": outcome,
    }
    for key, value in extra.items():
        payload[key] = "***" if key in _REDACTED_KEYS else value
    logger.log(level, json.dumps(payload, default=str))
