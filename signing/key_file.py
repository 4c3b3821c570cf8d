from __future__ import annotations

import json
from pathlib import Path

from wallet.errors import InvalidPrivateKey

from .local_key import LocalKeySigner


class KeyFileSigner(LocalKeySigner):
    """
    Primary signer loaded from a plain JSON key file.

    Format: {"private_key": "0x..."}
    """

    def __init__(self, path: str | Path) -> None:
        path = Path(path).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"Key file not found: {path}")
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict) or not data.get("private_key"):
            raise InvalidPrivateKey(f"{path} has no 'private_key' field")
        super().__init__(str(data["private_key"]))
        self.path = path
