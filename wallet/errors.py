from __future__ import annotations

from typing import Any, Dict


class WalletError(Exception):
    """
    Base class for wallet failures.

    Every error carries a stable `code`, a human readable `message` and a small
    `data` dict that the tool layer can return verbatim. Never put key material
    in `data`.
    """

    code: str = "wallet_error"

    def __init__(self, message: str, data: Dict[str, Any] | None = None) -> None:
        self.message = message
        self.data: Dict[str, Any] = data or {}
        super().__init__(message)


class AccountNotFound(WalletError):
    code = "account_not_found"

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Account not found for address: {address}", {"address": address})


class AccountAlreadyExists(WalletError):
    code = "account_already_exists"

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Account already exists for address: {address}", {"address": address})


class SignerNotFound(WalletError):
    code = "signer_not_found"

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Signer not found for identifier: {identifier}", {"identifier": identifier})


class InvalidPrivateKey(WalletError):
    code = "invalid_private_key"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Invalid private key: {reason}")


class InvalidAlias(WalletError):
    code = "invalid_alias"

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(
            f"Alias '{alias}' is invalid. It must be 1-20 alphanumeric characters.",
            {"alias": alias},
        )


class AliasAlreadyExists(WalletError):
    code = "alias_already_exists"

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Alias '{alias}' already exists.", {"alias": alias})


class InvalidAddress(WalletError):
    code = "invalid_address"

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid address: {value}", {"value": value})


class NonceMismatch(WalletError):
    code = "nonce_mismatch"

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Nonce mismatch: expected {expected}, but got {actual}",
            {"expected": expected, "actual": actual},
        )


class MissingField(WalletError):
    code = "missing_field"

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"{field} is required", {"field": field})


class SignatureError(WalletError):
    code = "signature_error"


class TransactionDecodeError(WalletError):
    code = "transaction_decode_error"


class SnapshotError(WalletError):
    code = "snapshot_error"


class AliasNotFound(WalletError):
    code = "alias_not_found"

    def __init__(self, alias: str) -> None:
        self.alias = alias
        super().__init__(f"Alias '{alias}' not found.", {"alias": alias})
