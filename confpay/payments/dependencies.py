"""
Fournisseurs FastAPI (Depends) du checkout PayPal.
Les collaborateurs sont assemblés ici puis injectés: les tests remplacent
get_checkout via app.dependency_overrides.
"""
from typing import Optional

from fastapi import Depends

from confpay.audit.repository import build_audit_log
from confpay.audit.sink import AuditLog
from confpay.config import (
    AUDIT_LOG_BACKEND,
    PAYPAL_API_PASSWORD,
    PAYPAL_API_SIGNATURE,
    PAYPAL_API_USERNAME,
    PAYPAL_SANDBOX,
    PAYPAL_TIMEOUT,
)
from confpay.orders.repository import SupabaseOrderSystem
from .legacy import LegacyNotificationAdapter
from .options import PayPalOptions
from .paypal_client import PayPalClient
from .service import PayPalCheckout

_gateway: Optional[PayPalClient] = None
_audit_log: Optional[AuditLog] = None

def get_paypal_options() -> PayPalOptions:
    return PayPalOptions(
        api_username=PAYPAL_API_USERNAME,
        api_password=PAYPAL_API_PASSWORD,
        api_signature=PAYPAL_API_SIGNATURE,
        sandbox=PAYPAL_SANDBOX,
    )

def get_gateway() -> PayPalClient:
    global _gateway
    if _gateway is None:
        _gateway = PayPalClient.from_options(get_paypal_options(), timeout=PAYPAL_TIMEOUT)
    return _gateway

def get_audit_log() -> AuditLog:
    global _audit_log
    if _audit_log is None:
        _audit_log = build_audit_log(AUDIT_LOG_BACKEND)
    return _audit_log

def get_checkout() -> PayPalCheckout:
    return PayPalCheckout(get_gateway(), SupabaseOrderSystem(), get_audit_log())

def get_legacy_adapter(checkout: PayPalCheckout = Depends(get_checkout)) -> LegacyNotificationAdapter:
    return LegacyNotificationAdapter(checkout)

def close_gateway() -> None:
    """Libère le pool httpx (arrêt de l'application)."""
    global _gateway
    if _gateway is not None:
        _gateway.close()
        _gateway = None
