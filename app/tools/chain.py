from fastmcp import FastMCP

from app.core.container import global_container
from app.tools.responses import json_exc, json_ok
from wallet.validation import try_parse_address


def eth_get_balance(address: str) -> str:
    """Gets the ETH balance for an address or a wallet alias."""
    try:
        target = try_parse_address(address) or address
        found = global_container.store.get_account(address)
        if found is not None:
            target = found[1]
        balance = global_container.eth_client.get_balance(target)
    except Exception as e:
        return json_exc(e)
    return json_ok({"address": target, "balance_eth": balance})


def eth_get_current_block() -> str:
    """Gets the current block number of the Ethereum network."""
    try:
        block_number = global_container.eth_client.get_current_block()
    except Exception as e:
        return json_exc(e)
    return json_ok({"block_number": block_number})


def eth_send_signed_transaction(signed_transaction_hex: str) -> str:
    """Sends a signed transaction (hex encoded) to the network."""
    try:
        tx_hash = global_container.eth_client.send_raw_transaction(signed_transaction_hex)
    except Exception as e:
        return json_exc(e)
    return json_ok({"transaction_hash": tx_hash})


def eth_get_transaction_receipt(transaction_hash: str) -> str:
    """Gets a transaction receipt by its hash."""
    try:
        receipt = global_container.eth_client.get_transaction_receipt(transaction_hash)
    except Exception as e:
        return json_exc(e)
    if receipt is None:
        return json_ok({"found": False, "status": "pending"})
    status = "success" if int(receipt.get("status") or 0) == 1 else "failed"
    return json_ok(
        {
            "found": True,
            "status": status,
            "block_number": receipt.get("blockNumber"),
            "transaction_hash": receipt.get("transactionHash"),
        }
    )


def eth_get_transaction_info(transaction_hash: str) -> str:
    """Gets information about a transaction by its hash."""
    try:
        info = global_container.eth_client.get_transaction_info(transaction_hash)
    except Exception as e:
        return json_exc(e)
    if info is None:
        return json_ok({"found": False})
    return json_ok({"found": True, "transaction": info})


def register_chain_tools(mcp: FastMCP):
    mcp.add_tool(eth_get_balance)
    mcp.add_tool(eth_get_current_block)
    mcp.add_tool(eth_send_signed_transaction)
    mcp.add_tool(eth_get_transaction_receipt)
    mcp.add_tool(eth_get_transaction_info)
