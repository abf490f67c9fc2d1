from confpay.payments.notifications import decode_form_body, resolve_transaction_id

def test_parent_transaction_preferred():
    assert resolve_transaction_id({"txn_id": "T2", "parent_txn_id": "T1"}) == "T1"
    assert resolve_transaction_id({"txn_id": "T2", "parent_txn_id": "  "}) == "T2"
    assert resolve_transaction_id({"txn_id": ""}) is None
    assert resolve_transaction_id({}) is None

def test_decode_honours_declared_charset():
    fields = decode_form_body(b"first_name=J%E9r%F4me&charset=windows-1252")
    assert fields["first_name"] == "Jérôme"

def test_decode_defaults_to_utf8():
    fields = decode_form_body(b"first_name=J%C3%A9r%C3%B4me&payment_status=Completed")
    assert fields == {"first_name": "Jérôme", "payment_status": "Completed"}

def test_decode_unknown_charset_falls_back():
    fields = decode_form_body(b"item_name=Pass&charset=not-a-charset")
    assert fields["item_name"] == "Pass"

def test_decode_empty_body():
    assert decode_form_body(b"") == {}
