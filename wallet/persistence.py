from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from signing.base import Signer

from .errors import SnapshotError
from .store import AccountStore

logger = logging.getLogger("wallet.persistence")


def load_store(path: str | Path, default_signer: Optional[Signer] = None) -> AccountStore:
    """
    Load the wallet snapshot at `path`.

    A missing file yields an empty store. A file that cannot be parsed at all
    is moved aside to `<name>.corrupt` before an empty store is returned, so
    the next save never overwrites the only copy of its keys. Per-entry
    problems are handled by `AccountStore.from_snapshot` without dropping
    accounts.
    """
    path = Path(path).expanduser()
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("Creating new wallet at %s", path)
        return AccountStore(default_signer=default_signer)

    logger.info("Loading wallet from %s", path)
    try:
        data = json.loads(contents)
        return AccountStore.from_snapshot(data, default_signer=default_signer)
    except (json.JSONDecodeError, SnapshotError) as exc:
        backup = quarantine(path)
        logger.warning("Failed to parse wallet file (moved to %s), creating a new one: %s", backup, exc)
        return AccountStore(default_signer=default_signer)


def quarantine(path: Path) -> Path:
    """Rename an unreadable wallet file to a free `<name>.corrupt[.N]` sibling."""
    backup = path.with_name(path.name + ".corrupt")
    n = 1
    while backup.exists():
        backup = path.with_name(f"{path.name}.corrupt.{n}")
        n += 1
    os.replace(path, backup)
    return backup


def save_store(store: AccountStore, path: str | Path) -> None:
    """
    Write the snapshot atomically: temp file in the same directory, fsync,
    then rename over the target. Clears the dirty flag on success unless the
    store changed while the file was being written.
    """
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    generation = store.generation
    payload = json.dumps(store.to_snapshot(), indent=2, sort_keys=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.chmod(tmp_name, 0o600)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    store.mark_clean(generation)
    logger.info("Saved wallet to %s", path)


def flush_if_dirty(store: AccountStore, path: str | Path) -> bool:
    """Persist the store if it has unsaved changes. Returns True if written."""
    if not store.dirty:
        return False
    save_store(store, path)
    return True
