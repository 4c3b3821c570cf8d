from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from .base import Signer
from .encrypted_keystore import EncryptedKeystoreSigner
from .env_private_key import EnvPrivateKeySigner
from .key_file import KeyFileSigner
from .remote_signer import RemoteSigner

if TYPE_CHECKING:
    from app.core.settings import Settings

logger = logging.getLogger("wallet.signing")


def get_primary_signer(settings: "Settings") -> Optional[Signer]:
    """
    Select the process-wide primary signer based on SIGNER_TYPE.

    Supported:
    - key_file (default): JSON file at WALLET_KEY_FILE
    - env_private_key: uses PRIVATE_KEY env var
    - keystore: uses KEYSTORE_PATH + KEYSTORE_PASSWORD
    - remote: uses SIGNER_REMOTE_URL
    - none: no primary signer

    A missing key file is not an error: the wallet then signs only with keys
    imported into the account store.
    """
    signer_type = settings.SIGNER_TYPE.value
    if signer_type == "none":
        return None
    if signer_type == "env_private_key":
        return EnvPrivateKeySigner()
    if signer_type == "keystore":
        return EncryptedKeystoreSigner()
    if signer_type == "remote":
        return RemoteSigner()
    if signer_type == "key_file":
        path = Path(settings.WALLET_KEY_FILE).expanduser()
        if not path.exists():
            logger.warning("Key file not found at %s. Signing will use imported accounts only.", path)
            return None
        signer = KeyFileSigner(path)
        logger.info("Loaded primary signer %s from %s", signer.get_address(), path)
        return signer
    raise ValueError(f"Unsupported SIGNER_TYPE: {signer_type}")
