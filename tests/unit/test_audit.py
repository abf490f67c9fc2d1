import logging

from confpay.audit.repository import SupabaseAuditStore, build_audit_log
from confpay.audit.sink import AuditLog, MemoryAuditStore, redact
from confpay.payments.checkout_state import CheckoutState

def test_redact_credentials_recursively():
    data = {"USER": "u", "PWD": "p", "SIGNATURE": "s", "nested": [{"PWD": "x", "AMT": "1"}], "AMT": "50"}
    assert redact(data) == {
        "USER": "***", "PWD": "***", "SIGNATURE": "***",
        "nested": [{"PWD": "***", "AMT": "1"}], "AMT": "50",
    }

def test_record_stores_correlation_ids():
    store = MemoryAuditStore()
    AuditLog(store).record("return.charged", "ok", payment_token="ABC", transaction_id="T1",
                           state=CheckoutState.CHARGING, data={"PWD": "secret"})
    entry = store.entries[0]
    assert entry["event"] == "return.charged"
    assert entry["payment_token"] == "ABC"
    assert entry["transaction_id"] == "T1"
    assert entry["state"] == "charging"
    assert entry["data"] == {"PWD": "***"}

def test_warning_logged_at_warning_level(caplog):
    with caplog.at_level(logging.WARNING, logger="confpay.audit"):
        AuditLog().warning("notify.unverified", "Could not verify PayPal IPN.", payment_token="ABC")
    assert "notify.unverified" in caplog.text

def test_failing_store_does_not_break_payment(caplog):
    def broken(entry):
        raise RuntimeError("db down")

    with caplog.at_level(logging.ERROR, logger="confpay.audit"):
        entry = AuditLog(broken).record("cancel", "cancelled", payment_token="ABC")
    assert entry["event"] == "cancel"
    assert "audit.store failed" in caplog.text

def test_memory_store_is_bounded():
    store = MemoryAuditStore(maxlen=2)
    log = AuditLog(store)
    for i in range(3):
        log.record(f"e{i}", "m")
    assert store.events() == ["e1", "e2"]
    store.clear()
    assert store.entries == []

def test_build_audit_log_backends():
    assert isinstance(build_audit_log("supabase").store, SupabaseAuditStore)
    assert isinstance(build_audit_log("MEMORY").store, MemoryAuditStore)
    assert build_audit_log("none").store is None
    assert build_audit_log("kafka").store is None

def test_supabase_store_inserts_entry(monkeypatch):
    from unittest.mock import MagicMock

    client = MagicMock()
    client.table.return_value.insert.return_value.execute.return_value.data = [{"id": 1}]
    monkeypatch.setattr("confpay.infra.supabase_client.get_service_supabase", lambda: client)

    row = SupabaseAuditStore()({"event": "cancel"})

    assert row == {"id": 1}
    client.table.assert_called_with("payment_logs")
    client.table.return_value.insert.assert_called_with({"event": "cancel"})
