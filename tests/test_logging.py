import io
import json
import logging

from conftest import KNOWN_KEY

from observability import build_log_context, configure_logging, log_event
from transaction import TransactionBuilder


def test_build_log_context_drops_none(monkeypatch):
    monkeypatch.setenv("WALLET_SERVICE_NAME", "wallet-test")
    assert build_log_context(component="x", request_id=None) == {"service": "wallet-test", "component": "x"}


def test_log_event_emits_json(caplog):
    with caplog.at_level(logging.INFO, logger="wallet"):
        log_event("unit.test", ctx={"service": "s"}, data={"n": 1})
    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == {"event": "unit.test", "service": "s", "data": {"n": 1}}


def test_log_event_respects_level(caplog):
    with caplog.at_level(logging.WARNING, logger="wallet"):
        log_event("quiet", level="debug")
    assert caplog.records == []


def test_configure_logging_writes_to_stream():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    stream = io.StringIO()
    try:
        configure_logging("debug", stream=stream)
        logging.getLogger("wallet.test").debug("hello")
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
    assert "hello" in stream.getvalue()


def test_sign_event_never_contains_key_material(known_store, caplog):
    with caplog.at_level(logging.DEBUG, logger="wallet"):
        known_store.sign_transaction(TransactionBuilder().chain_id(1).nonce(0).build(), "testaccount")
    assert any('"wallet.sign"' in r.getMessage() for r in caplog.records)
    assert KNOWN_KEY not in caplog.text
