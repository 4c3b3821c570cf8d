from __future__ import annotations

from typing import Optional

from eth_utils import to_checksum_address

from .errors import InvalidAddress, InvalidAlias

MAX_ALIAS_LEN = 20


def is_valid_alias(alias: str) -> bool:
    """1-20 characters, ASCII letters, digits or underscore."""
    if not alias or len(alias) > MAX_ALIAS_LEN:
        return False
    return all((c.isascii() and c.isalnum()) or c == "_" for c in alias)


def normalize_alias(alias: str) -> str:
    """
    Validate an alias and return its stored (lowercase) form.

    Aliases are unique and resolved case-insensitively across the whole store,
    so the lowercase form is the only one ever indexed.
    """
    if not isinstance(alias, str) or not is_valid_alias(alias):
        raise InvalidAlias(str(alias))
    return alias.lower()


def is_hex_address(s: str) -> bool:
    v = (s or "").strip()
    if v.startswith("0x") or v.startswith("0X"):
        v = v[2:]
    if len(v) != 40:
        return False
    try:
        int(v, 16)
        return True
    except ValueError:
        return False


def try_parse_address(value: str) -> Optional[str]:
    """Strict address parse. Returns the checksummed form or None."""
    if not isinstance(value, str) or not is_hex_address(value):
        return None
    v = value.strip()
    if not v.lower().startswith("0x"):
        v = "0x" + v
    return to_checksum_address(v.lower())


def parse_address(value: str) -> str:
    addr = try_parse_address(value)
    if addr is None:
        raise InvalidAddress(str(value))
    return addr


def normalize_private_key_hex(value: str) -> Optional[str]:
    """
    Normalize a hex private key.

    - trims whitespace
    - strips an optional 0x prefix
    - requires exactly 64 hex chars, not all zeros

    Returns the lowercase hex string (no prefix) or None when malformed.
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    if s.startswith("0x") or s.startswith("0X"):
        s = s[2:]
    if len(s) != 64:
        return None
    if not all(c in "0123456789abcdefABCDEF" for c in s):
        return None
    if int(s, 16) == 0:
        return None
    return s.lower()
