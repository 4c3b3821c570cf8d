from fastmcp import FastMCP

from app.core.container import global_container
from app.tools.responses import json_exc, json_ok
from signing.local_key import LocalKeySigner
from wallet.errors import AliasAlreadyExists, AliasNotFound, InvalidPrivateKey
from wallet.validation import normalize_alias, normalize_private_key_hex, parse_address


def new_account(alias: str = "") -> str:
    """Creates a new Ethereum account, optionally with an alias."""
    try:
        address = global_container.store.create_account(alias or "")
    except Exception as e:
        return json_exc(e)
    global_container.flush()
    return json_ok({"address": address})


def list_accounts() -> str:
    """Lists all Ethereum accounts in the wallet."""
    try:
        accounts = [
            {
                "address": address,
                "nonce": account.nonce,
                "aliases": account.aliases,
                "is_signing": signing,
            }
            for address, account, signing in global_container.store.list_signing_status()
        ]
    except Exception as e:
        return json_exc(e)
    return json_ok(accounts)


def resolve_alias(alias: str) -> str:
    """Resolves an alias (case-insensitive) to its Ethereum address."""
    address = global_container.store.resolve_alias(alias)
    if address is None:
        return json_exc(AliasNotFound(alias))
    return json_ok({"alias": alias, "address": address})


def set_alias(address: str, alias: str) -> str:
    """
    Sets an alias for an Ethereum address.

    Unknown addresses are added as watch-only accounts first.
    """
    store = global_container.store
    try:
        addr = parse_address(address)
        key = normalize_alias(alias)
        if store.resolve_alias(key) is not None:
            raise AliasAlreadyExists(key)
        created = store.add_watch_only(addr)
        store.add_alias(addr, key)
    except Exception as e:
        return json_exc(e)
    global_container.flush()
    return json_ok({"address": addr, "alias": key, "watch_only_created": created})


def import_private_key(private_key: str) -> str:
    """
    Imports a private key (0x-prefixed or raw 64 hex chars), creating a new
    account or upgrading an existing watch-only one.
    """
    store = global_container.store
    try:
        normalized = normalize_private_key_hex(private_key)
        if normalized is None:
            raise InvalidPrivateKey("Invalid private key format (expect 32-byte hex)")
        address = LocalKeySigner(normalized).get_address()
        if store.get_account(address) is not None:
            # raises AccountAlreadyExists unless the entry is watch-only or holds an unusable key
            store.upgrade_watch_only(normalized)
            upgraded = True
        else:
            store.import_private_key(normalized, "")
            upgraded = False
    except Exception as e:
        return json_exc(e)
    global_container.flush()
    return json_ok({"address": address, "upgraded_watch_only": upgraded})


def set_nonce(identifier: str, nonce: int) -> str:
    """Overrides the stored nonce of an account (address or alias)."""
    try:
        global_container.store.set_nonce(identifier, nonce)
    except Exception as e:
        return json_exc(e)
    global_container.flush()
    return json_ok({"identifier": identifier, "nonce": nonce})


def register_account_tools(mcp: FastMCP):
    mcp.add_tool(new_account)
    mcp.add_tool(list_accounts)
    mcp.add_tool(set_alias)
    mcp.add_tool(resolve_alias)
    mcp.add_tool(import_private_key)
    mcp.add_tool(set_nonce)
