from __future__ import annotations

from typing import TYPE_CHECKING

from eth_account import Account
from eth_keys import keys

from wallet.errors import InvalidPrivateKey
from wallet.validation import normalize_private_key_hex

from .base import Signer

if TYPE_CHECKING:
    from transaction.models import Eip1559TransactionRequest


class LocalKeySigner(Signer):
    """
    In-memory signer around a raw secp256k1 private key.
    """

    def __init__(self, private_key: str | bytes) -> None:
        if isinstance(private_key, (bytes, bytearray)):
            private_key = bytes(private_key).hex()
        normalized = normalize_private_key_hex(private_key)
        if normalized is None:
            raise InvalidPrivateKey("expected a non-zero 32-byte hex string")
        try:
            self._account = Account.from_key("0x" + normalized)
        except Exception as exc:
            raise InvalidPrivateKey(str(exc)) from exc
        self._key = keys.PrivateKey(bytes(self._account.key))

    @classmethod
    def generate(cls) -> "LocalKeySigner":
        return cls(bytes(Account.create().key))

    @property
    def private_key_hex(self) -> str:
        return bytes(self._account.key).hex()

    def get_address(self) -> str:
        return self._account.address

    def sign_hash(
        self, msg_hash: bytes, *, request: "Eip1559TransactionRequest | None" = None
    ) -> keys.Signature:
        if len(msg_hash) != 32:
            raise ValueError("expected a 32-byte message hash")
        return self._key.sign_msg_hash(msg_hash)
