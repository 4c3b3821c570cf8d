import json

import pytest
from conftest import OTHER_ADDRESS, ZERO_ADDRESS

from transaction import DEFAULT_GAS, Eip1559TransactionRequest, TransactionBuilder
from transaction.models import UINT256_MAX, to_uint
from wallet.errors import InvalidAddress, MissingField


def test_build_applies_defaults():
    tx = TransactionBuilder().chain_id(1).nonce(0).build()
    assert tx.gas == DEFAULT_GAS == 21000
    assert tx.value == 0
    assert tx.max_fee_per_gas == 0
    assert tx.max_priority_fee_per_gas == 0
    assert tx.data is None
    assert tx.to is None
    assert tx.access_list == ()


def test_build_requires_chain_id():
    with pytest.raises(MissingField) as e:
        TransactionBuilder().nonce(0).to(ZERO_ADDRESS).build()
    assert e.value.data == {"field": "chain_id"}


def test_build_requires_nonce():
    with pytest.raises(MissingField) as e:
        TransactionBuilder().chain_id(1).build()
    assert e.value.code == "missing_field"
    assert e.value.data == {"field": "nonce"}


def test_setters_accept_hex_and_decimal_strings():
    tx = (
        TransactionBuilder()
        .chain_id("0x1")
        .nonce("7")
        .value("0xde0b6b3a7640000")
        .gas(30000)
        .max_fee_per_gas("20000000000")
        .max_priority_fee_per_gas(1_500_000_000)
        .to(OTHER_ADDRESS.lower())
        .build()
    )
    assert tx.chain_id == 1
    assert tx.nonce == 7
    assert tx.value == 10**18
    assert tx.gas == 30000
    assert tx.max_fee_per_gas == 20 * 10**9
    assert tx.to == OTHER_ADDRESS


def test_to_rejects_malformed_address():
    with pytest.raises(InvalidAddress):
        TransactionBuilder().to("0x1234")


@pytest.mark.parametrize("bad", [-1, UINT256_MAX + 1, True, "nope", 1.5])
def test_integer_setters_reject_out_of_range(bad):
    with pytest.raises(ValueError):
        TransactionBuilder().value(bad)


def test_to_uint_bounds():
    assert to_uint(0, name="x") == 0
    assert to_uint(UINT256_MAX, name="x") == UINT256_MAX
    assert to_uint(" 0x10 ", name="x") == 16


def test_request_json_round_trip():
    tx = (
        TransactionBuilder()
        .chain_id(5)
        .to(OTHER_ADDRESS)
        .value(12345)
        .data(b"\xca\xfe")
        .max_fee_per_gas(100)
        .max_priority_fee_per_gas(2)
        .nonce(3)
        .build()
    )
    as_json = json.dumps(tx.to_dict())
    restored = Eip1559TransactionRequest.from_dict(json.loads(as_json))
    assert restored == tx
    assert restored.signing_hash() == tx.signing_hash()


def test_request_to_dict_shape():
    data = TransactionBuilder().chain_id(1).nonce(0).value(1000).build().to_dict()
    assert data["value"] == "0x3e8"
    assert data["gas"] == "0x5208"
    assert data["nonce"] == "0x0"
    assert data["data"] is None
    assert data["access_list"] == []


def test_from_dict_missing_required_fields():
    with pytest.raises(ValueError):
        Eip1559TransactionRequest.from_dict({"nonce": 0})
    with pytest.raises(ValueError):
        Eip1559TransactionRequest.from_dict({"chain_id": 1})
    with pytest.raises(ValueError):
        Eip1559TransactionRequest.from_dict(["not", "a", "dict"])


def test_signing_hash_depends_on_every_field():
    base = TransactionBuilder().chain_id(1).nonce(0).to(ZERO_ADDRESS).value(1)
    h = base.build().signing_hash()
    assert TransactionBuilder().chain_id(2).nonce(0).to(ZERO_ADDRESS).value(1).build().signing_hash() != h
    assert TransactionBuilder().chain_id(1).nonce(1).to(ZERO_ADDRESS).value(1).build().signing_hash() != h
    assert TransactionBuilder().chain_id(1).nonce(0).to(ZERO_ADDRESS).value(2).build().signing_hash() != h
