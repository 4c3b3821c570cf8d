from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Optional

from web3 import Web3
from web3.exceptions import TransactionNotFound
from web3.providers.rpc import HTTPProvider

from wallet.validation import parse_address


@lru_cache(maxsize=16)
def get_web3(rpc_url: str, timeout: float = 10.0) -> Web3:
    return Web3(HTTPProvider(rpc_url, request_kwargs={"timeout": float(timeout)}))


def is_tx_hash(s: str) -> bool:
    v = (s or "").strip()
    if v.startswith("0x"):
        v = v[2:]
    if len(v) != 64:
        return False
    try:
        int(v, 16)
        return True
    except ValueError:
        return False


def _tx_hash_hex(tx_hash: str) -> str:
    if not is_tx_hash(tx_hash):
        raise ValueError(f"Invalid transaction hash: {tx_hash}")
    v = tx_hash.strip()
    return v if v.startswith("0x") else "0x" + v


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, dict) or hasattr(value, "items"):
        return {str(k): _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


class EthClient:
    """
    Thin JSON-RPC client used by the tool layer for chain reads and broadcast.
    The account store never talks to the chain itself.
    """

    def __init__(self, rpc_url: str, *, timeout: float = 10.0, w3: Optional[Web3] = None) -> None:
        self.rpc_url = rpc_url
        self._timeout = timeout
        self._w3 = w3

    @property
    def w3(self) -> Web3:
        if self._w3 is None:
            self._w3 = get_web3(self.rpc_url, self._timeout)
        return self._w3

    def get_current_block(self) -> int:
        return int(self.w3.eth.block_number)

    def get_balance(self, address: str) -> str:
        """Balance in ether as a decimal string."""
        addr = parse_address(address)
        wei = self.w3.eth.get_balance(addr)
        return str(Web3.from_wei(wei, "ether"))

    def send_raw_transaction(self, raw_tx: bytes | str) -> str:
        if isinstance(raw_tx, str):
            s = raw_tx.strip()
            if s.startswith("0x"):
                s = s[2:]
            try:
                raw_tx = bytes.fromhex(s)
            except ValueError:
                raise ValueError("signed transaction must be hex encoded") from None
        if not raw_tx:
            raise ValueError("signed transaction is empty")
        tx_hash = self.w3.eth.send_raw_transaction(raw_tx)
        # tx_hash is HexBytes
        return self.w3.to_hex(tx_hash)

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        try:
            receipt = self.w3.eth.get_transaction_receipt(_tx_hash_hex(tx_hash))
        except TransactionNotFound:
            return None
        return _to_jsonable(receipt)

    def get_transaction_info(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        try:
            tx = self.w3.eth.get_transaction(_tx_hash_hex(tx_hash))
        except TransactionNotFound:
            return None
        return _to_jsonable(tx)
