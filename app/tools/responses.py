import json
from typing import Any, Dict

from errors import classify_exception


def json_ok(data: Any = None) -> str:
    payload = {"ok": True, "data": data if data is not None else {}}
    return json.dumps(payload, indent=2, sort_keys=True)


def json_err(code: str, message: str, data: Dict[str, Any] | None = None) -> str:
    payload = {"ok": False, "error": {"code": code, "message": message, "data": data or {}}}
    return json.dumps(payload, indent=2, sort_keys=True)


def json_exc(e: Exception, data: Dict[str, Any] | None = None) -> str:
    err = classify_exception(e)
    merged = dict(err.data)
    merged.update(data or {})
    return json_err(err.code, err.message, merged)
