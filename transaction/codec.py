from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional, Tuple

import rlp
from eth_utils import keccak, to_checksum_address

from wallet.errors import TransactionDecodeError

if TYPE_CHECKING:
    from .models import Eip1559TransactionRequest

EIP1559_TX_TYPE = 0x02


def _rlp_int(i: int) -> bytes:
    if i == 0:
        return b""
    return int(i).to_bytes((int(i).bit_length() + 7) // 8, "big")


def _int_from(b: Any, *, name: str) -> int:
    if not isinstance(b, bytes):
        raise TransactionDecodeError(f"{name} must be a byte string")
    if len(b) > 1 and b[0] == 0:
        raise TransactionDecodeError(f"{name} has leading zero bytes")
    return int.from_bytes(b, "big")


def _address_bytes(addr: Optional[str]) -> bytes:
    if not addr:
        return b""
    s = addr[2:] if addr.lower().startswith("0x") else addr
    b = bytes.fromhex(s)
    if len(b) != 20:
        raise ValueError("to must be 20 bytes")
    return b


def _access_list_items(access_list) -> List[Any]:
    return [[_address_bytes(addr), [bytes(k) for k in keys]] for addr, keys in access_list]


def _unsigned_fields(tx: "Eip1559TransactionRequest") -> List[Any]:
    return [
        _rlp_int(tx.chain_id),
        _rlp_int(tx.nonce),
        _rlp_int(tx.max_priority_fee_per_gas),
        _rlp_int(tx.max_fee_per_gas),
        _rlp_int(tx.gas),
        _address_bytes(tx.to),
        _rlp_int(tx.value),
        tx.data or b"",
        _access_list_items(tx.access_list),
    ]


def signing_payload(tx: "Eip1559TransactionRequest") -> bytes:
    return bytes([EIP1559_TX_TYPE]) + rlp.encode(_unsigned_fields(tx))


def signing_hash(tx: "Eip1559TransactionRequest") -> bytes:
    """Keccak-256 of the typed unsigned payload; the digest that gets signed."""
    return keccak(signing_payload(tx))


def encode_signed(tx: "Eip1559TransactionRequest", y_parity: int, r: int, s: int) -> bytes:
    fields = _unsigned_fields(tx) + [_rlp_int(y_parity), _rlp_int(r), _rlp_int(s)]
    return bytes([EIP1559_TX_TYPE]) + rlp.encode(fields)


def transaction_hash(raw: bytes) -> bytes:
    return keccak(raw)


def decode_signed(raw: bytes) -> Tuple["Eip1559TransactionRequest", Tuple[int, int, int]]:
    """
    Decode signed EIP-1559 raw bytes into (request, (y_parity, r, s)).
    """
    from .models import Eip1559TransactionRequest

    if not raw or raw[0] != EIP1559_TX_TYPE:
        raise TransactionDecodeError("not an EIP-1559 typed transaction")
    try:
        items = rlp.decode(bytes(raw[1:]))
    except rlp.exceptions.DecodingError as exc:
        raise TransactionDecodeError(f"RLP decoding error: {exc}") from exc
    if not isinstance(items, list) or len(items) != 12:
        raise TransactionDecodeError("expected 12 fields in signed EIP-1559 payload")

    to_b = items[5]
    if not isinstance(to_b, bytes) or len(to_b) not in (0, 20):
        raise TransactionDecodeError("to must be empty or 20 bytes")
    data_b = items[7]
    if not isinstance(data_b, bytes):
        raise TransactionDecodeError("data must be a byte string")
    raw_access = items[8]
    if not isinstance(raw_access, list):
        raise TransactionDecodeError("access list must be a list")
    access_list = []
    for entry in raw_access:
        if not isinstance(entry, list) or len(entry) != 2 or not isinstance(entry[1], list):
            raise TransactionDecodeError("malformed access list entry")
        if not isinstance(entry[0], bytes) or len(entry[0]) != 20:
            raise TransactionDecodeError("access list address must be 20 bytes")
        if not all(isinstance(k, bytes) and len(k) == 32 for k in entry[1]):
            raise TransactionDecodeError("access list storage keys must be 32 bytes")
        access_list.append((to_checksum_address(entry[0]), tuple(entry[1])))

    tx = Eip1559TransactionRequest(
        chain_id=_int_from(items[0], name="chain_id"),
        nonce=_int_from(items[1], name="nonce"),
        max_priority_fee_per_gas=_int_from(items[2], name="max_priority_fee_per_gas"),
        max_fee_per_gas=_int_from(items[3], name="max_fee_per_gas"),
        gas=_int_from(items[4], name="gas"),
        to=to_checksum_address(to_b) if to_b else None,
        value=_int_from(items[6], name="value"),
        data=data_b or None,
        access_list=tuple(access_list),
    )
    signature = (
        _int_from(items[9], name="y_parity"),
        _int_from(items[10], name="r"),
        _int_from(items[11], name="s"),
    )
    return tx, signature
