from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from eth_keys import keys

if TYPE_CHECKING:
    from transaction.models import Eip1559TransactionRequest


class Signer(ABC):
    """
    A minimal secp256k1 signing interface for EVM transaction hashes.

    `request` is passed along as signing intent so that out-of-process signers
    can apply their own policy and audit; local signers ignore it.
    """

    @abstractmethod
    def get_address(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def sign_hash(
        self, msg_hash: bytes, *, request: "Eip1559TransactionRequest | None" = None
    ) -> keys.Signature:
        raise NotImplementedError
