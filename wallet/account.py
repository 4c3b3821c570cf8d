from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Account:
    """
    One wallet entry.

    `private_key` is lowercase hex without 0x prefix, or None for a watch-only
    account (an address that only carries aliases and cannot sign). Snapshots
    store a watch-only key as the empty string.
    `nonce` is the next nonce to be used for a transaction.
    """

    private_key: Optional[str] = None
    nonce: int = 0
    aliases: List[str] = field(default_factory=list)

    @property
    def is_watch_only(self) -> bool:
        return not self.private_key

    def copy(self) -> "Account":
        return Account(private_key=self.private_key, nonce=self.nonce, aliases=list(self.aliases))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "private_key": self.private_key or "",
            "nonce": self.nonce,
            "aliases": list(self.aliases),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        pk = data.get("private_key") or None
        if pk is not None:
            pk = str(pk).strip().lower()
            if pk.startswith("0x"):
                pk = pk[2:]
        nonce = int(data.get("nonce") or 0)
        if nonce < 0:
            raise ValueError("nonce must be >= 0")
        aliases = [str(a) for a in (data.get("aliases") or [])]
        return cls(private_key=pk, nonce=nonce, aliases=aliases)
