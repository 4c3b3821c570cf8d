from .base import Signer
from .encrypted_keystore import EncryptedKeystoreSigner
from .env_private_key import EnvPrivateKeySigner
from .factory import get_primary_signer
from .key_file import KeyFileSigner
from .local_key import LocalKeySigner
from .remote_signer import RemoteSigner

__all__ = [
    "Signer",
    "LocalKeySigner",
    "EnvPrivateKeySigner",
    "KeyFileSigner",
    "EncryptedKeystoreSigner",
    "RemoteSigner",
    "get_primary_signer",
]
