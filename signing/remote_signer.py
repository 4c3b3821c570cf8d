from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Optional, Tuple

import requests
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as EthKeysValidationError

from wallet.errors import SignatureError

from .base import Signer

if TYPE_CHECKING:
    from transaction.models import Eip1559TransactionRequest

SECP256K1_N = int(
    "0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141",
    16,
)
SECP256K1_HALF_N = SECP256K1_N // 2


def _parse_int(v: Any, *, name: str) -> int:
    if isinstance(v, bool) or v is None:
        raise SignatureError(f"Remote signer returned invalid {name}")
    if isinstance(v, int):
        return v
    s = str(v).strip().lower()
    try:
        return int(s, 16) if s.startswith("0x") else int(s, 10)
    except ValueError:
        raise SignatureError(f"Remote signer returned invalid {name}") from None


def _normalize_sig(r: int, s: int) -> Tuple[int, int]:
    if r <= 0 or r >= SECP256K1_N:
        raise SignatureError("invalid r")
    if s <= 0 or s >= SECP256K1_N:
        raise SignatureError("invalid s")
    if s > SECP256K1_HALF_N:
        s = SECP256K1_N - s
    return r, s


def _find_recovery_id(msg_hash_32: bytes, r: int, s: int, expected_address: str) -> int:
    exp = expected_address.strip().lower()
    if not exp.startswith("0x"):
        exp = "0x" + exp
    for recid in (0, 1):
        try:
            sig = keys.Signature(vrs=(recid, r, s))
            pub = sig.recover_public_key_from_msg_hash(msg_hash_32)
        except (BadSignature, EthKeysValidationError):
            continue
        if pub.to_checksum_address().lower() == exp:
            return recid
    raise SignatureError("could not determine recovery id (address mismatch)")


class RemoteSigner(Signer):
    """
    Remote signer for keys held outside the process (sidecar, HSM proxy,
    hardware wallet bridge).

    Protocol (HTTP JSON):
    GET  {SIGNER_REMOTE_URL}/address   -> {"address": "0x..."}
    POST {SIGNER_REMOTE_URL}/sign_hash
         body: {"hash": "0x<32 bytes>", "intent": {...tx request...} | null}
         response: {"r": "0x...", "s": "0x..."}

    The recovery id is derived locally by checking which candidate recovers to
    the signer address, so a response signed by the wrong key is rejected.
    """

    def __init__(self, url_env: str = "SIGNER_REMOTE_URL") -> None:
        url = (os.getenv(url_env) or "").strip()
        if not url:
            raise ValueError(f"{url_env} environment variable not set")
        self._base_url = url.rstrip("/")
        self._cached_address: Optional[str] = None

    def _timeout(self) -> float:
        return float(os.getenv("HTTP_TIMEOUT_SEC", "10"))

    def get_address(self) -> str:
        if self._cached_address:
            return self._cached_address
        r = requests.get(f"{self._base_url}/address", timeout=self._timeout())
        r.raise_for_status()
        data = r.json()
        addr = str(data.get("address") or "").strip()
        if not addr:
            raise ValueError("Remote signer returned empty address")
        self._cached_address = addr
        return addr

    def sign_hash(
        self, msg_hash: bytes, *, request: "Eip1559TransactionRequest | None" = None
    ) -> keys.Signature:
        if len(msg_hash) != 32:
            raise ValueError("expected a 32-byte message hash")
        payload = {
            "hash": "0x" + msg_hash.hex(),
            "intent": request.to_dict() if request is not None else None,
        }
        resp = requests.post(f"{self._base_url}/sign_hash", json=payload, timeout=self._timeout())
        resp.raise_for_status()
        data = resp.json()
        r, s = _normalize_sig(_parse_int(data.get("r"), name="r"), _parse_int(data.get("s"), name="s"))
        recid = _find_recovery_id(msg_hash, r, s, self.get_address())
        return keys.Signature(vrs=(recid, r, s))
