"""
Lecture des IPN PayPal (corps application/x-www-form-urlencoded).
"""
import codecs
from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl

DEFAULT_CHARSET = "utf-8"

# module confpay.payments.notifications
def _charset_of(text: str) -> str:
    declared = dict(parse_qsl(text, keep_blank_values=True, encoding="latin-1")).get("charset") or ""
    try:
        return codecs.lookup(declared.strip()).name if declared.strip() else DEFAULT_CHARSET
    except LookupError:
        return DEFAULT_CHARSET

def decode_form_body(raw_body: bytes) -> Dict[str, str]:
    """
    Décode un corps form-encoded en dict.
    - Respecte le champ "charset" envoyé par PayPal (ex: windows-1252), utf-8 sinon.
    - Le corps brut reste la seule source pour la validation IPN (jamais ré-encodé).
    """
    if not raw_body:
        return {}
    text = raw_body.decode("latin-1")
    charset = _charset_of(text)
    return dict(parse_qsl(text, keep_blank_values=True, encoding=charset, errors="replace"))

def resolve_transaction_id(fields: Mapping[str, str]) -> Optional[str]:
    """
    Transaction id d'une IPN, en privilégiant parent_txn_id (remboursements,
    annulations, litiges qui portent sur un débit existant).
    """
    parent = (fields.get("parent_txn_id") or "").strip()
    if parent:
        return parent
    txn_id = (fields.get("txn_id") or "").strip()
    return txn_id or None
