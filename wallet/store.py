from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from eth_utils import to_checksum_address

from observability import build_log_context, log_event
from signing.base import Signer
from signing.local_key import LocalKeySigner
from transaction import codec
from transaction.models import Eip1559TransactionRequest, SignedTransaction

from .account import Account
from .errors import (
    AccountAlreadyExists,
    AccountNotFound,
    AliasAlreadyExists,
    InvalidAlias,
    InvalidPrivateKey,
    NonceMismatch,
    SignerNotFound,
    SnapshotError,
)
from .validation import normalize_alias, parse_address, try_parse_address

logger = logging.getLogger("wallet.store")
STORE_CTX = build_log_context(component="account_store")


class AccountStore:
    """
    Owns every account and the alias index.

    All reads and writes, including the whole signing protocol, run under one
    store-wide lock, so a nonce check and its increment are atomic with
    respect to other callers.

    `default_signer` is the process-wide primary signer. It signs for its own
    address even when that address was never imported as an account with key
    material.
    """

    def __init__(self, default_signer: Optional[Signer] = None) -> None:
        self._lock = threading.RLock()
        self._accounts: Dict[str, Account] = {}
        self._aliases: Dict[str, str] = {}
        self._default_signer = default_signer
        self._dirty = False
        self._generation = 0

    # ------------------------------------------------------------------
    # Dirty flag
    # ------------------------------------------------------------------

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def generation(self) -> int:
        """Mutation counter; lets a writer tell whether its snapshot is still current."""
        return self._generation

    def mark_clean(self, generation: Optional[int] = None) -> None:
        """
        Called by the persistence layer after a successful write-back. When
        `generation` is given, the flag is only cleared if nothing changed since.
        """
        with self._lock:
            if generation is None or generation == self._generation:
                self._dirty = False

    def _mark_dirty(self) -> None:
        self._dirty = True
        self._generation += 1

    @property
    def default_signer(self) -> Optional[Signer]:
        return self._default_signer

    # ------------------------------------------------------------------
    # Account creation
    # ------------------------------------------------------------------

    def create_account(self, alias: str = "") -> str:
        """Generate a fresh keypair and add it. Returns the checksum address."""
        return self._add_account(LocalKeySigner.generate(), alias)

    def import_private_key(self, private_key: str, alias: str = "") -> str:
        """
        Import a hex private key.

        Fails with AccountAlreadyExists when the address is already present,
        including when it is a watch-only entry; see `upgrade_watch_only`.
        """
        return self._add_account(self._parse_key(private_key), alias)

    def upgrade_watch_only(self, private_key: str) -> str:
        """
        Attach key material to an existing watch-only account, keeping nonce and
        aliases. Also replaces a stored key that is unusable for the address.
        """
        signer = self._parse_key(private_key)
        address = signer.get_address()
        with self._lock:
            account = self._accounts.get(address)
            if account is None:
                raise AccountNotFound(address)
            if not account.is_watch_only and _key_address(account.private_key) == address:
                raise AccountAlreadyExists(address)
            account.private_key = signer.private_key_hex
            self._mark_dirty()
        log_event("wallet.watch_only_upgraded", ctx=STORE_CTX, data={"address": address})
        return address

    def add_watch_only(self, address: str) -> bool:
        """
        Materialize a watch-only account (no key, nonce 0) for an unknown address.

        Returns True if a new entry was created.
        """
        addr = parse_address(address)
        with self._lock:
            if addr in self._accounts:
                return False
            self._accounts[addr] = Account()
            self._mark_dirty()
        log_event("wallet.watch_only_added", ctx=STORE_CTX, data={"address": addr})
        return True

    @staticmethod
    def _parse_key(private_key: str) -> LocalKeySigner:
        if not isinstance(private_key, str):
            raise InvalidPrivateKey("expected a hex string")
        return LocalKeySigner(private_key)

    def _add_account(self, signer: LocalKeySigner, alias: str) -> str:
        address = signer.get_address()
        with self._lock:
            if address in self._accounts:
                raise AccountAlreadyExists(address)
            account = Account(private_key=signer.private_key_hex)
            if alias:
                key = normalize_alias(alias)
                if key in self._aliases:
                    raise AliasAlreadyExists(key)
                self._aliases[key] = address
                account.aliases.append(key)
            self._accounts[address] = account
            self._mark_dirty()
        log_event("wallet.account_added", ctx=STORE_CTX, data={"address": address, "alias": alias or None})
        return address

    # ------------------------------------------------------------------
    # Aliases
    # ------------------------------------------------------------------

    def add_alias(self, address: str, alias: str) -> None:
        addr = parse_address(address)
        key = normalize_alias(alias)
        with self._lock:
            if key in self._aliases:
                raise AliasAlreadyExists(key)
            account = self._accounts.get(addr)
            if account is None:
                raise AccountNotFound(addr)
            self._aliases[key] = addr
            account.aliases.append(key)
            self._mark_dirty()
        log_event("wallet.alias_added", ctx=STORE_CTX, data={"address": addr, "alias": key})

    def resolve_alias(self, alias: str) -> Optional[str]:
        if not isinstance(alias, str):
            return None
        with self._lock:
            return self._aliases.get(alias.strip().lower())

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def _lookup(self, identifier: str) -> Optional[Tuple[str, Account]]:
        # Address form first; alias lookup only when it does not parse as one.
        addr = try_parse_address(identifier)
        if addr is None:
            addr = self._aliases.get(identifier.strip().lower()) if isinstance(identifier, str) else None
            if addr is None:
                return None
        account = self._accounts.get(addr)
        if account is None:
            return None
        return addr, account

    def get_account(self, identifier: str) -> Optional[Tuple[Account, str]]:
        """
        Resolve an address or alias. Returns (copy of account, checksum address).
        """
        with self._lock:
            found = self._lookup(identifier)
            if found is None:
                return None
            addr, account = found
            return account.copy(), addr

    def list_accounts(self) -> List[Tuple[str, Account]]:
        with self._lock:
            return [(addr, acc.copy()) for addr, acc in self._accounts.items()]

    def is_signing(self, address: str) -> bool:
        try:
            self.get_signer(address)
        except AccountNotFound:
            return False
        return True

    def list_signing_status(self) -> List[Tuple[str, Account, bool]]:
        """
        `list_accounts` plus an is-signing flag per account.

        The default signer's address is resolved once, before taking the lock,
        since a remote signer answers it over HTTP. Its failures propagate.
        """
        default_addr = None
        if self._default_signer is not None:
            default_addr = to_checksum_address(self._default_signer.get_address())
        with self._lock:
            return [
                (
                    addr,
                    acc.copy(),
                    addr == default_addr or (bool(acc.private_key) and _key_address(acc.private_key) == addr),
                )
                for addr, acc in self._accounts.items()
            ]

    def set_nonce(self, identifier: str, nonce: int) -> None:
        """Administrative nonce override."""
        if isinstance(nonce, bool) or not isinstance(nonce, int) or nonce < 0:
            raise ValueError("nonce must be a non-negative integer")
        with self._lock:
            found = self._lookup(identifier)
            if found is None:
                raise SignerNotFound(identifier)
            addr, account = found
            previous = account.nonce
            account.nonce = nonce
            self._mark_dirty()
        log_event(
            "wallet.nonce_set",
            ctx=STORE_CTX,
            data={"address": addr, "previous": previous, "nonce": nonce},
        )

    def get_signer(self, address: str) -> Signer:
        """
        The account's own key if it has a usable one, else the default signer
        when its address matches.
        """
        addr = parse_address(address)
        with self._lock:
            account = self._accounts.get(addr)
            if account is not None and account.private_key:
                if _key_address(account.private_key) == addr:
                    return LocalKeySigner(account.private_key)
                logger.warning("Stored key for %s is unusable; trying primary signer", addr)
            if self._default_signer is not None and _same_address(self._default_signer.get_address(), addr):
                return self._default_signer
        raise AccountNotFound(addr)

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign_transaction(self, request: Eip1559TransactionRequest, from_identifier: str) -> SignedTransaction:
        """
        Sign `request` with the account named by `from_identifier`.

        The request nonce must equal the account nonce exactly. The nonce is
        incremented by one only after a signature has been produced and
        encoded; any earlier failure leaves the store untouched.
        """
        with self._lock:
            found = self._lookup(from_identifier)
            if found is None:
                raise SignerNotFound(from_identifier)
            from_address, account = found

            if request.nonce != account.nonce:
                raise NonceMismatch(expected=account.nonce, actual=request.nonce)

            signer = self.get_signer(from_address)

            digest = codec.signing_hash(request)
            signature = signer.sign_hash(digest, request=request)

            raw = codec.encode_signed(request, signature.v, signature.r, signature.s)
            tx_hash = codec.transaction_hash(raw)

            account.nonce += 1
            self._mark_dirty()

        log_event(
            "wallet.sign",
            ctx=STORE_CTX,
            data={
                "address": from_address,
                "nonce": request.nonce,
                "chain_id": request.chain_id,
                "hash": "0x" + tx_hash.hex(),
            },
        )
        return SignedTransaction(
            raw_transaction=raw,
            hash=tx_hash,
            signature=(signature.v, signature.r.to_bytes(32, "big"), signature.s.to_bytes(32, "big")),
            chain_id=request.chain_id,
        )

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_snapshot(self) -> Dict[str, Any]:
        """
        Serialize to the persisted shape:
        {"accounts": {address: {private_key, nonce, aliases}}, "aliases": {alias: address}}
        """
        with self._lock:
            return {
                "accounts": {addr.lower(): acc.to_dict() for addr, acc in self._accounts.items()},
                "aliases": {alias: addr.lower() for alias, addr in self._aliases.items()},
            }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any], default_signer: Optional[Signer] = None) -> "AccountStore":
        """
        Rebuild a store from a snapshot.

        Only a structurally broken snapshot (bad JSON shape, unparsable account
        address, bad nonce) raises SnapshotError. Problems confined to one
        entry are logged and degraded so that no account or key is dropped:

        - an alias that is invalid or collides case-insensitively with an
          earlier one is skipped;
        - a private key that does not parse, or belongs to another address, is
          kept verbatim but never used for signing (see `get_signer`);
        - a top-level alias entry that disagrees with the account lists is
          ignored; the index is derived from the account lists.
        """
        if not isinstance(data, dict):
            raise SnapshotError("snapshot must be a JSON object")
        store = cls(default_signer=default_signer)
        raw_accounts = data.get("accounts") or {}
        raw_aliases = data.get("aliases") or {}
        if not isinstance(raw_accounts, dict) or not isinstance(raw_aliases, dict):
            raise SnapshotError("'accounts' and 'aliases' must be objects")

        for raw_addr, raw_acc in raw_accounts.items():
            addr = try_parse_address(raw_addr)
            if addr is None:
                raise SnapshotError(f"invalid account address: {raw_addr}")
            if addr in store._accounts:
                raise SnapshotError(f"duplicate account address: {raw_addr}")
            if not isinstance(raw_acc, dict):
                raise SnapshotError(f"account entry for {raw_addr} must be an object")
            try:
                acc = Account.from_dict(raw_acc)
            except (TypeError, ValueError) as exc:
                raise SnapshotError(f"invalid account entry for {raw_addr}: {exc}") from exc
            if acc.private_key and _key_address(acc.private_key) != addr:
                logger.warning("Stored private key for %s is unusable; keeping it but not signing with it", addr)
            aliases = []
            for alias in acc.aliases:
                try:
                    key = normalize_alias(alias)
                except InvalidAlias:
                    logger.warning("Skipping invalid alias %r for %s", alias, addr)
                    continue
                if key in store._aliases:
                    logger.warning(
                        "Skipping alias %r for %s: already bound to %s", alias, addr, store._aliases[key]
                    )
                    continue
                store._aliases[key] = addr
                aliases.append(key)
            acc.aliases = aliases
            store._accounts[addr] = acc

        for alias, raw_addr in raw_aliases.items():
            bound = store._aliases.get(str(alias).lower())
            if bound is None or try_parse_address(str(raw_addr)) != bound:
                logger.warning("Ignoring alias index entry %r -> %s; it disagrees with the account entries", alias, raw_addr)
        return store


def _same_address(a: str, b: str) -> bool:
    return to_checksum_address(a) == to_checksum_address(b)


def _key_address(private_key: str) -> Optional[str]:
    try:
        return LocalKeySigner(private_key).get_address()
    except InvalidPrivateKey:
        return None
