from __future__ import annotations

from typing import Any, Optional

from wallet.errors import MissingField
from wallet.validation import parse_address

from .models import DEFAULT_GAS, Eip1559TransactionRequest, to_uint


class TransactionBuilder:
    """
    Fluent builder for `Eip1559TransactionRequest`.

    `chain_id` and `nonce` are required. `gas` defaults to 21000 (a plain value
    transfer); value and fee fields default to 0; the access list is always
    empty.
    """

    def __init__(self) -> None:
        self._chain_id: Optional[int] = None
        self._to: Optional[str] = None
        self._value: Optional[int] = None
        self._data: Optional[bytes] = None
        self._gas: Optional[int] = None
        self._max_fee_per_gas: Optional[int] = None
        self._max_priority_fee_per_gas: Optional[int] = None
        self._nonce: Optional[int] = None

    def chain_id(self, chain_id: Any) -> "TransactionBuilder":
        self._chain_id = to_uint(chain_id, name="chain_id")
        return self

    def to(self, address: str) -> "TransactionBuilder":
        self._to = parse_address(address)
        return self

    def value(self, value: Any) -> "TransactionBuilder":
        self._value = to_uint(value, name="value")
        return self

    def data(self, data: bytes) -> "TransactionBuilder":
        self._data = bytes(data)
        return self

    def gas(self, gas: Any) -> "TransactionBuilder":
        self._gas = to_uint(gas, name="gas")
        return self

    def max_fee_per_gas(self, max_fee: Any) -> "TransactionBuilder":
        self._max_fee_per_gas = to_uint(max_fee, name="max_fee_per_gas")
        return self

    def max_priority_fee_per_gas(self, max_priority_fee: Any) -> "TransactionBuilder":
        self._max_priority_fee_per_gas = to_uint(max_priority_fee, name="max_priority_fee_per_gas")
        return self

    def nonce(self, nonce: Any) -> "TransactionBuilder":
        self._nonce = to_uint(nonce, name="nonce")
        return self

    def build(self) -> Eip1559TransactionRequest:
        if self._chain_id is None:
            raise MissingField("chain_id")
        if self._nonce is None:
            raise MissingField("nonce")
        return Eip1559TransactionRequest(
            chain_id=self._chain_id,
            nonce=self._nonce,
            to=self._to,
            value=self._value or 0,
            data=self._data or None,
            gas=self._gas if self._gas is not None else DEFAULT_GAS,
            max_fee_per_gas=self._max_fee_per_gas or 0,
            max_priority_fee_per_gas=self._max_priority_fee_per_gas or 0,
        )
