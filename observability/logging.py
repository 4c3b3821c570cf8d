from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Dict, Optional

_LOGGER_NAME = "wallet"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def configure_logging(level: str = "info", *, stream: Any = None) -> None:
    """
    Route log output to stderr. stdout is reserved for the MCP stdio transport.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(_LEVELS.get((level or "info").strip().lower(), logging.INFO))


def build_log_context(**fields: Any) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {"service": os.getenv("WALLET_SERVICE_NAME", "mcp-wallet").strip() or "mcp-wallet"}
    ctx.update({k: v for k, v in fields.items() if v is not None})
    return ctx


def log_event(
    event: str,
    *,
    ctx: Optional[Dict[str, Any]] = None,
    data: Optional[Dict[str, Any]] = None,
    level: str = "info",
) -> None:
    """
    Emit one structured JSON log line. Callers must not pass key material.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    lvl = _LEVELS.get(level, logging.INFO)
    if not logger.isEnabledFor(lvl):
        return
    payload: Dict[str, Any] = {"event": event}
    payload.update(ctx or {})
    if data:
        payload["data"] = data
    logger.log(lvl, json.dumps(payload, sort_keys=True, default=str))
