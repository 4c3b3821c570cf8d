"""Account store for the agent wallet.

Holds keypairs, nonces and aliases, and signs EIP-1559 transactions while
keeping every account nonce consistent. Only the error types are re-exported
here; import the store from `wallet.store`.
"""

from .errors import (
    AccountAlreadyExists,
    AccountNotFound,
    AliasAlreadyExists,
    AliasNotFound,
    InvalidAddress,
    InvalidAlias,
    InvalidPrivateKey,
    MissingField,
    NonceMismatch,
    SignatureError,
    SignerNotFound,
    SnapshotError,
    TransactionDecodeError,
    WalletError,
)

__all__ = [
    "AccountAlreadyExists",
    "AccountNotFound",
    "AliasAlreadyExists",
    "AliasNotFound",
    "InvalidAddress",
    "InvalidAlias",
    "InvalidPrivateKey",
    "MissingField",
    "NonceMismatch",
    "SignatureError",
    "SignerNotFound",
    "SnapshotError",
    "TransactionDecodeError",
    "WalletError",
]
