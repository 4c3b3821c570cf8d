import json
from unittest.mock import MagicMock, patch

import pytest
from conftest import KNOWN_ADDRESS, KNOWN_KEY, OTHER_ADDRESS, ZERO_ADDRESS
from web3.exceptions import Web3Exception

from app.core.container import global_container
from app.tools.accounts import (
    import_private_key,
    list_accounts,
    new_account,
    resolve_alias,
    set_alias,
    set_nonce,
)
from app.tools.chain import (
    eth_get_balance,
    eth_get_current_block,
    eth_get_transaction_info,
    eth_get_transaction_receipt,
    eth_send_signed_transaction,
)
from app.tools.transactions import create_tx, eth_transfer_eth, sign_tx
from wallet.store import AccountStore

TX_HASH = "0x" + "cd" * 32


@pytest.fixture
def container(tmp_path):
    eth_client = MagicMock()
    with patch.object(global_container, "store", AccountStore()):
        with patch.object(global_container, "eth_client", eth_client):
            with patch.object(global_container, "wallet_file", str(tmp_path / "wallet.json")):
                yield global_container


def _call(fn, *args, **kwargs):
    return json.loads(fn(*args, **kwargs))


def test_new_account_and_list(container):
    res = _call(new_account, alias="alice")
    assert res["ok"] is True
    address = res["data"]["address"]

    listed = _call(list_accounts)["data"]
    assert listed == [{"address": address, "nonce": 0, "aliases": ["alice"], "is_signing": True}]

    saved = json.loads(open(container.wallet_file, encoding="utf-8").read())
    assert address.lower() in saved["accounts"]


def test_new_account_bad_alias(container):
    res = _call(new_account, alias="no spaces allowed")
    assert res["ok"] is False
    assert res["error"]["code"] == "invalid_alias"


def test_set_alias_creates_watch_only_then_import_upgrades(container):
    res = _call(set_alias, address=KNOWN_ADDRESS.lower(), alias="Vault")
    assert res["data"] == {"address": KNOWN_ADDRESS, "alias": "vault", "watch_only_created": True}
    assert _call(list_accounts)["data"][0]["is_signing"] is False

    res = _call(import_private_key, private_key="0x" + KNOWN_KEY)
    assert res["data"] == {"address": KNOWN_ADDRESS, "upgraded_watch_only": True}
    account = _call(list_accounts)["data"][0]
    assert account["aliases"] == ["vault"]
    assert account["is_signing"] is True

    again = _call(import_private_key, private_key=KNOWN_KEY)
    assert again["ok"] is False
    assert again["error"]["code"] == "account_already_exists"


def test_set_alias_duplicate_does_not_create_watch_only(container):
    _call(set_alias, address=KNOWN_ADDRESS, alias="taken")
    res = _call(set_alias, address=OTHER_ADDRESS, alias="TAKEN")
    assert res["error"]["code"] == "alias_already_exists"
    assert [a["address"] for a in _call(list_accounts)["data"]] == [KNOWN_ADDRESS]


def test_import_private_key_rejects_garbage(container):
    res = _call(import_private_key, private_key="0x1234")
    assert res["ok"] is False
    assert res["error"]["code"] == "invalid_private_key"


def test_create_then_sign(container):
    _call(import_private_key, private_key=KNOWN_KEY)
    _call(set_alias, address=KNOWN_ADDRESS, alias="me")

    created = _call(create_tx, sender="me", to=ZERO_ADDRESS, value="1000", chain_id=1)
    assert created["ok"] is True
    tx = created["data"]
    assert tx["nonce"] == "0x0"
    assert tx["value"] == "0x3e8"

    signed = _call(sign_tx, sender="me", tx_json=json.dumps(tx))
    assert signed["ok"] is True
    assert signed["data"]["raw_transaction"].startswith("0x02")
    assert _call(list_accounts)["data"][0]["nonce"] == 1

    replay = _call(sign_tx, sender="me", tx_json=tx)
    assert replay["error"]["code"] == "nonce_mismatch"
    assert replay["error"]["data"] == {"expected": 1, "actual": 0}


def test_create_tx_unknown_sender(container):
    res = _call(create_tx, sender="ghost", to=ZERO_ADDRESS, value="1", chain_id=1)
    assert res["error"]["code"] == "signer_not_found"


def test_set_nonce_tool(container):
    _call(new_account, alias="bob")
    assert _call(set_nonce, identifier="bob", nonce=9)["ok"] is True
    assert _call(list_accounts)["data"][0]["nonce"] == 9
    assert _call(set_nonce, identifier="bob", nonce=-2)["error"]["code"] == "invalid_params"


def test_transfer_eth_broadcasts(container):
    _call(import_private_key, private_key=KNOWN_KEY)
    container.eth_client.send_raw_transaction.return_value = TX_HASH

    res = _call(eth_transfer_eth, sender=KNOWN_ADDRESS, to=OTHER_ADDRESS, value_eth="0.5", chain_id=1)

    assert res == {"ok": True, "data": {"transaction_hash": TX_HASH}}
    raw = container.eth_client.send_raw_transaction.call_args[0][0]
    assert raw[0] == 0x02
    assert _call(list_accounts)["data"][0]["nonce"] == 1


def test_transfer_eth_broadcast_failure_returns_signed_bytes(container):
    _call(import_private_key, private_key=KNOWN_KEY)
    container.eth_client.send_raw_transaction.side_effect = Web3Exception("nonce too low")

    res = _call(eth_transfer_eth, sender=KNOWN_ADDRESS, to=OTHER_ADDRESS, value_eth=1, chain_id=1)

    assert res["ok"] is False
    assert res["error"]["code"] == "rpc_error"
    assert res["error"]["data"]["raw_transaction"].startswith("0x02")
    assert _call(list_accounts)["data"][0]["nonce"] == 1


def test_transfer_eth_rejects_negative_amount(container):
    _call(import_private_key, private_key=KNOWN_KEY)
    res = _call(eth_transfer_eth, sender=KNOWN_ADDRESS, to=OTHER_ADDRESS, value_eth="-1", chain_id=1)
    assert res["error"]["code"] == "invalid_params"
    container.eth_client.send_raw_transaction.assert_not_called()


def test_get_balance_resolves_alias(container):
    _call(set_alias, address=OTHER_ADDRESS, alias="friend")
    container.eth_client.get_balance.return_value = "2.25"
    res = _call(eth_get_balance, address="friend")
    assert res["data"] == {"address": OTHER_ADDRESS, "balance_eth": "2.25"}
    container.eth_client.get_balance.assert_called_once_with(OTHER_ADDRESS)


def test_chain_reads(container):
    container.eth_client.get_current_block.return_value = 123
    assert _call(eth_get_current_block)["data"] == {"block_number": 123}

    container.eth_client.send_raw_transaction.return_value = TX_HASH
    assert _call(eth_send_signed_transaction, signed_transaction_hex="0x02c0")["data"]["transaction_hash"] == TX_HASH

    container.eth_client.get_transaction_info.return_value = None
    assert _call(eth_get_transaction_info, transaction_hash=TX_HASH)["data"] == {"found": False}


def test_receipt_statuses(container):
    client = container.eth_client
    client.get_transaction_receipt.return_value = None
    assert _call(eth_get_transaction_receipt, transaction_hash=TX_HASH)["data"] == {
        "found": False,
        "status": "pending",
    }

    client.get_transaction_receipt.return_value = {"status": 0, "blockNumber": 9, "transactionHash": TX_HASH}
    data = _call(eth_get_transaction_receipt, transaction_hash=TX_HASH)["data"]
    assert data == {"found": True, "status": "failed", "block_number": 9, "transaction_hash": TX_HASH}


def test_rpc_unreachable(container):
    container.eth_client.get_current_block.side_effect = ConnectionError("refused")
    res = _call(eth_get_current_block)
    assert res["error"]["code"] == "rpc_unreachable"


def test_server_registers_tools():
    import server

    assert server.mcp.name == "mcp-wallet"


def test_resolve_alias_is_case_insensitive(container):
    address = _call(new_account, alias="AliCe")["data"]["address"]
    for name in ("alice", "ALICE"):
        res = _call(resolve_alias, alias=name)
        assert res["ok"] is True
        assert res["data"]["address"] == address


def test_resolve_alias_unknown(container):
    res = _call(resolve_alias, alias="does_not_exist")
    assert res["ok"] is False
    assert res["error"]["code"] == "alias_not_found"
    assert res["error"]["data"] == {"alias": "does_not_exist"}


def test_list_accounts_reports_default_signer_failure(container):
    signer = MagicMock()
    signer.get_address.side_effect = ConnectionError("signer down")
    store = AccountStore(default_signer=signer)
    store.add_watch_only(OTHER_ADDRESS)
    store.import_private_key(KNOWN_KEY, "")
    with patch.object(global_container, "store", store):
        res = _call(list_accounts)
    assert res["ok"] is False
    assert res["error"]["code"] == "rpc_unreachable"
    assert signer.get_address.call_count == 1


def test_list_accounts_resolves_default_signer_once(container):
    signer = MagicMock()
    signer.get_address.return_value = OTHER_ADDRESS
    store = AccountStore(default_signer=signer)
    store.add_watch_only(OTHER_ADDRESS)
    store.add_watch_only(ZERO_ADDRESS)
    store.import_private_key(KNOWN_KEY, "")
    with patch.object(global_container, "store", store):
        listed = {a["address"]: a["is_signing"] for a in _call(list_accounts)["data"]}
    assert listed == {OTHER_ADDRESS: True, ZERO_ADDRESS: False, KNOWN_ADDRESS: True}
    assert signer.get_address.call_count == 1
