import os
import sys

import pytest

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from wallet.store import AccountStore

# Well-known development keys (Anvil / Hardhat accounts 0 and 1)
KNOWN_KEY = "ac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
KNOWN_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_KEY = "59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@pytest.fixture
def store():
    return AccountStore()

@pytest.fixture
def known_store():
    s = AccountStore()
    s.import_private_key(KNOWN_KEY, "testaccount")
    return s
