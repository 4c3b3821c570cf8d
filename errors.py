from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

import requests
from web3.exceptions import Web3Exception

from app.core.settings import SettingsValidationError
from wallet.errors import WalletError


@dataclass
class AppError(Exception):
    code: str
    message: str
    data: Dict[str, Any]


def classify_exception(e: Exception) -> AppError:
    """
    Map wallet / RPC / input failures into stable error codes.
    """
    if isinstance(e, AppError):
        return e
    if isinstance(e, WalletError):
        return AppError(e.code, e.message, dict(e.data))
    if isinstance(e, SettingsValidationError):
        return AppError("config_error", str(e), {})
    if isinstance(e, (Web3Exception, requests.RequestException)):
        return AppError("rpc_error", str(e), {})
    if isinstance(e, ConnectionError):
        return AppError("rpc_unreachable", str(e), {})
    if isinstance(e, ValueError):
        return AppError("invalid_params", str(e), {})

    return AppError("unknown_error", str(e), {})
