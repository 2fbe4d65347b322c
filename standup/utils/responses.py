"""Response envelopes and structured error logging."""

import json
import logging
from typing import Any, Optional

from standup.utils.dates import utcnow

logger = logging.getLogger("standup.api")


def success_response(data: Any) -> dict:
    return {"ok": True, "data": data}


def error_response(code: str, error: str) -> dict:
    return {"ok": False, "code": code, "error": error}


def log_structured_error(
    code: str,
    error: str,
    context: Optional[str] = None,
    raw: Optional[str] = None,
) -> None:
    """Emit one JSON line: level, timestamp, code, error, context?, raw?"""
    entry = {
        "level": "error",
        "timestamp": utcnow().isoformat(),
        "code": code,
        "error": error,
    }
    if context:
        entry["context"] = context
    if raw:
        entry["raw"] = raw
    logger.error(json.dumps(entry, ensure_ascii=False))
