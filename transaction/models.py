"""Transaction data structures: the EIP-1559 request and its signed form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as EthKeysValidationError

from wallet.errors import SignatureError
from wallet.validation import parse_address

from . import codec

UINT256_MAX = 2**256 - 1
DEFAULT_GAS = 21000

AccessList = Tuple[Tuple[str, Tuple[bytes, ...]], ...]


def to_uint(value: Any, *, name: str) -> int:
    """
    Coerce ints, decimal strings and 0x-hex strings to a uint256.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid int field {name}: {value!r}")
    if isinstance(value, int):
        out = value
    elif isinstance(value, str):
        s = value.strip().lower()
        try:
            out = int(s, 16) if s.startswith("0x") else int(s, 10)
        except ValueError:
            raise ValueError(f"Invalid int field {name}: {value!r}") from None
    else:
        raise ValueError(f"Invalid int field {name}: {type(value).__name__}")
    if out < 0 or out > UINT256_MAX:
        raise ValueError(f"{name} out of uint256 range")
    return out


def _to_bytes(v: Any, *, name: str) -> Optional[bytes]:
    if v is None:
        return None
    if isinstance(v, (bytes, bytearray)):
        return bytes(v) or None
    if isinstance(v, str):
        s = v.strip()
        if s.startswith("0x"):
            s = s[2:]
        if s == "":
            return None
        try:
            return bytes.fromhex(s)
        except ValueError:
            raise ValueError(f"Invalid hex field {name}") from None
    raise ValueError(f"Invalid bytes field {name}: {type(v).__name__}")


def _hex_quantity(i: int) -> str:
    return hex(i)


@dataclass(frozen=True)
class Eip1559TransactionRequest:
    """
    An unsigned EIP-1559 transaction. Built by `TransactionBuilder`, consumed by
    `AccountStore.sign_transaction` and by the tool layer as JSON.
    """

    chain_id: int
    nonce: int
    to: Optional[str] = None
    value: int = 0
    data: Optional[bytes] = None
    gas: int = DEFAULT_GAS
    max_fee_per_gas: int = 0
    max_priority_fee_per_gas: int = 0
    access_list: AccessList = field(default_factory=tuple)

    def signing_hash(self) -> bytes:
        return codec.signing_hash(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "to": self.to,
            "value": _hex_quantity(self.value),
            "data": "0x" + self.data.hex() if self.data else None,
            "gas": _hex_quantity(self.gas),
            "max_fee_per_gas": _hex_quantity(self.max_fee_per_gas),
            "max_priority_fee_per_gas": _hex_quantity(self.max_priority_fee_per_gas),
            "nonce": _hex_quantity(self.nonce),
            "access_list": [
                {"address": addr, "storage_keys": ["0x" + k.hex() for k in storage_keys]}
                for addr, storage_keys in self.access_list
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Eip1559TransactionRequest":
        if not isinstance(data, dict):
            raise ValueError("transaction must be a JSON object")
        if data.get("chain_id") is None:
            raise ValueError("Missing required tx field: chain_id")
        if data.get("nonce") is None:
            raise ValueError("Missing required tx field: nonce")

        to = data.get("to")
        access_list = []
        for entry in data.get("access_list") or []:
            storage_keys = []
            for k in entry.get("storage_keys") or []:
                kb = _to_bytes(k, name="storage_keys") or b""
                if len(kb) != 32:
                    raise ValueError("storage keys must be 32 bytes")
                storage_keys.append(kb)
            access_list.append((parse_address(entry.get("address", "")), tuple(storage_keys)))

        gas = data.get("gas")
        return cls(
            chain_id=to_uint(data["chain_id"], name="chain_id"),
            nonce=to_uint(data["nonce"], name="nonce"),
            to=parse_address(to) if to else None,
            value=to_uint(data.get("value") or 0, name="value"),
            data=_to_bytes(data.get("data"), name="data"),
            gas=to_uint(gas, name="gas") if gas is not None else DEFAULT_GAS,
            max_fee_per_gas=to_uint(data.get("max_fee_per_gas") or 0, name="max_fee_per_gas"),
            max_priority_fee_per_gas=to_uint(
                data.get("max_priority_fee_per_gas") or 0, name="max_priority_fee_per_gas"
            ),
            access_list=tuple(access_list),
        )


@dataclass(frozen=True)
class SignedTransaction:
    """
    A signed, encoded transaction ready for `eth_sendRawTransaction`.

    `signature` is (y_parity, r, s) with r and s as 32-byte big-endian values.
    """

    raw_transaction: bytes
    hash: bytes
    signature: Tuple[int, bytes, bytes]
    chain_id: int

    def recover(self) -> str:
        """
        Re-derive the sender from the raw bytes and the stored signature.

        Decodes the typed transaction, rebuilds its signing hash and runs public
        key recovery. Used as an end-to-end check of build -> sign -> encode.
        """
        tx, _ = codec.decode_signed(self.raw_transaction)
        v, r_b, s_b = self.signature
        try:
            sig = keys.Signature(vrs=(v, int.from_bytes(r_b, "big"), int.from_bytes(s_b, "big")))
            pub = sig.recover_public_key_from_msg_hash(tx.signing_hash())
        except (BadSignature, EthKeysValidationError) as exc:
            raise SignatureError(f"Signature error: {exc}") from exc
        return pub.to_checksum_address()

    @property
    def raw_transaction_hex(self) -> str:
        return "0x" + self.raw_transaction.hex()

    def to_dict(self) -> Dict[str, Any]:
        v, r_b, s_b = self.signature
        return {
            "raw_transaction": self.raw_transaction_hex,
            "hash": "0x" + self.hash.hex(),
            "signature": [v, "0x" + r_b.hex(), "0x" + s_b.hex()],
            "chain_id": self.chain_id,
        }
