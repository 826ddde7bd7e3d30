from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict

Json = Dict[str, Any]


def configure_logging() -> None:
    """Configure stdlib logging for JSONL output.

    - Level from DEBT_REWARDS_LOG_LEVEL (default INFO).
    - Safe to call multiple times.
    """
    level_name = (os.environ.get("DEBT_REWARDS_LOG_LEVEL") or "INFO").strip().upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger("debt_rewards")
    if getattr(root, "_debt_rewards_configured", False):  # type: ignore[attr-defined]
        root.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False
    setattr(root, "_debt_rewards_configured", True)  # type: ignore[attr-defined]


def _jsonable(value: Any) -> Any:
    # Token amounts routinely exceed 2**53; keep them exact for JSON consumers.
    if isinstance(value, int) and not isinstance(value, bool) and abs(value) > 2**53:
        return str(value)
    return value


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    """Emit a single JSONL log event."""
    if not logger.isEnabledFor(logging.INFO):
        return
    payload: Json = {"event": event}
    payload.update({k: _jsonable(v) for k, v in fields.items()})
    logger.info(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
