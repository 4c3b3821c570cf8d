from __future__ import annotations

from typing import Optional

from app.core.settings import settings
from execution.evm import EthClient
from signing import get_primary_signer
from wallet.persistence import flush_if_dirty, load_store
from wallet.store import AccountStore


class Container:
    """
    Process-wide wiring shared by the tool modules.

    Starts with an empty in-memory store; `load()` swaps in the persisted one
    at server start so importing the tool modules has no filesystem effects.
    """

    def __init__(self):
        self.store = AccountStore()
        self.wallet_file: Optional[str] = None
        self.eth_client = EthClient(settings.RPC_URL, timeout=settings.HTTP_TIMEOUT_SEC)

    def load(self, wallet_file: Optional[str] = None) -> AccountStore:
        signer = get_primary_signer(settings)
        self.wallet_file = wallet_file or settings.WALLET_FILE
        self.store = load_store(self.wallet_file, default_signer=signer)
        return self.store

    def flush(self) -> bool:
        """Write the snapshot if the store is dirty. No-op until `load()` set a file."""
        if self.wallet_file is None:
            return False
        return flush_if_dirty(self.store, self.wallet_file)


global_container = Container()
