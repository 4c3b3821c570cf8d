from __future__ import annotations

import re
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

# A quoted 32-byte lowercase hex literal, i.e. something shaped like a raw private key.
_KEY_LITERAL = re.compile(r"""["'](0x)?[0-9a-f]{64}["']""")


def _is_excluded(path: Path) -> bool:
    parts = set(path.parts)
    if "vendor" in parts:
        return True
    if "tests" in parts:
        return True
    if "__pycache__" in parts:
        return True
    if ".venv" in parts or "site-packages" in parts:
        return True
    return False


def _runtime_lines():
    for p in REPO_ROOT.rglob("*.py"):
        if _is_excluded(p.relative_to(REPO_ROOT)):
            continue
        text = p.read_text(encoding="utf-8", errors="replace")
        for i, line in enumerate(text.splitlines(), start=1):
            yield p, i, line


def test_no_stubs_or_todos_in_runtime_code() -> None:
    """
    Enforce a repo-wide production quality rule:
    - no TODO/FIXME/XXX placeholders in runtime code
    - no "not yet implemented" wallet operations
    """
    forbidden_substrings = [
        "TODO",
        "FIXME",
        "XXX",
        "not yet ported",
        "not yet implemented",
    ]

    hits: list[str] = []
    for p, i, line in _runtime_lines():
        for s in forbidden_substrings:
            if s in line:
                hits.append(f"{p.relative_to(REPO_ROOT)}:{i}:{line.strip()}")

    assert not hits, "Found stub/TODO markers in runtime code:\n" + "\n".join(hits)


def test_no_hardcoded_private_keys_in_runtime_code() -> None:
    hits = [
        f"{p.relative_to(REPO_ROOT)}:{i}"
        for p, i, line in _runtime_lines()
        if _KEY_LITERAL.search(line)
    ]
    assert not hits, "Found key-shaped hex literals in runtime code:\n" + "\n".join(hits)
