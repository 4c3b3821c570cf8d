from __future__ import annotations

import json
import os
from pathlib import Path

from eth_account import Account

from .local_key import LocalKeySigner


class EncryptedKeystoreSigner(LocalKeySigner):
    """
    Primary signer decrypted from an Ethereum keystore JSON using a passphrase.

    Env vars:
    - KEYSTORE_PATH: path to keystore json file
    - KEYSTORE_PASSWORD: passphrase
    """

    def __init__(self, keystore_path_env: str = "KEYSTORE_PATH", password_env: str = "KEYSTORE_PASSWORD") -> None:  # nosec B107
        path_raw = os.getenv(keystore_path_env)
        password = os.getenv(password_env)
        if not path_raw:
            raise ValueError(f"{keystore_path_env} environment variable not set")
        if not password:
            raise ValueError(f"{password_env} environment variable not set")

        path = Path(path_raw).expanduser()
        if not path.exists():
            raise ValueError(f"Keystore file not found: {path}")

        keystore = json.loads(path.read_text())
        try:
            pk_bytes = Account.decrypt(keystore, password)
        except Exception as exc:
            raise ValueError(f"Failed to decrypt keystore: {exc}") from exc
        super().__init__(bytes(pk_bytes))
