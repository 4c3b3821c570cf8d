import json
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from fastmcp import FastMCP
from web3 import Web3

from app.core.container import global_container
from app.core.settings import settings
from app.tools.responses import json_exc, json_ok
from transaction import Eip1559TransactionRequest, TransactionBuilder
from wallet.errors import SignerNotFound


def _ether_to_wei(value_eth: Any) -> int:
    try:
        amount = Decimal(str(value_eth).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid 'value_eth': {value_eth}") from None
    if amount < 0:
        raise ValueError("value_eth must be >= 0")
    return int(Web3.to_wei(amount, "ether"))


def create_tx(
    sender: str,
    to: str,
    value: str,
    chain_id: int,
    gas: Optional[int] = None,
    max_fee_per_gas: Optional[str] = None,
    max_priority_fee_per_gas: Optional[str] = None,
) -> str:
    """
    Creates an EIP-1559 transaction request from `sender` (address or alias),
    using the account's current nonce. `value` and fees are in wei.
    """
    try:
        found = global_container.store.get_account(sender)
        if found is None:
            raise SignerNotFound(sender)
        account, _ = found

        builder = TransactionBuilder().chain_id(chain_id).to(to).value(value).nonce(account.nonce)
        if gas is not None:
            builder = builder.gas(gas)
        if max_fee_per_gas is not None:
            builder = builder.max_fee_per_gas(max_fee_per_gas)
        if max_priority_fee_per_gas is not None:
            builder = builder.max_priority_fee_per_gas(max_priority_fee_per_gas)
        tx_request = builder.build()
    except Exception as e:
        return json_exc(e)
    return json_ok(tx_request.to_dict())


def sign_tx(sender: str, tx_json: Dict[str, Any] | str) -> str:
    """Signs a transaction request (as produced by create_tx) with `sender`."""
    try:
        if isinstance(tx_json, str):
            tx_json = json.loads(tx_json)
        tx_request = Eip1559TransactionRequest.from_dict(tx_json)
        signed = global_container.store.sign_transaction(tx_request, sender)
    except Exception as e:
        return json_exc(e)
    global_container.flush()
    return json_ok(signed.to_dict())


def eth_transfer_eth(sender: str, to: str, value_eth: float | str, chain_id: int) -> str:
    """Creates, signs, and sends an ETH transfer transaction."""
    store = global_container.store
    try:
        value_wei = _ether_to_wei(value_eth)
        found = store.get_account(sender)
        if found is None:
            raise SignerNotFound(sender)
        account, _ = found
        tx_request = (
            TransactionBuilder()
            .chain_id(chain_id)
            .to(to)
            .value(value_wei)
            .max_fee_per_gas(settings.DEFAULT_MAX_FEE_PER_GAS_WEI)
            .max_priority_fee_per_gas(settings.DEFAULT_MAX_PRIORITY_FEE_PER_GAS_WEI)
            .nonce(account.nonce)
            .build()
        )
        signed = store.sign_transaction(tx_request, sender)
    except Exception as e:
        return json_exc(e)
    global_container.flush()

    try:
        tx_hash = global_container.eth_client.send_raw_transaction(signed.raw_transaction)
    except Exception as e:
        # The nonce is already consumed; hand back the signed bytes for rebroadcast.
        return json_exc(e, {"raw_transaction": signed.raw_transaction_hex, "hash": "0x" + signed.hash.hex()})
    return json_ok({"transaction_hash": tx_hash})


def register_transaction_tools(mcp: FastMCP):
    mcp.add_tool(create_tx)
    mcp.add_tool(sign_tx)
    mcp.add_tool(eth_transfer_eth)
