"""
Module 'payments' (feature-first): checkout PayPal Express et IPN.
Réunit client NVP, conversion des statuts, construction du payload commande,
machine d'état du checkout et adaptateur IPN ancien format.
"""

from .statuses import PaymentStatus, map_status
from .payload import build_checkout_payload, validate_order_total, amounts_match
from .paypal_client import PayPalClient, parse_nvp, is_success
from .errors import PaymentError, TransportError, CheckoutAbort, OrderTotalMismatch, AmountPrecisionError
from .outcomes import CheckoutOutcome
from .requests import InitiateRequest, ReturnRequest, CancelRequest, NotifyRequest, LegacyNotifyRequest
from .service import PayPalCheckout, SUPPORTED_CURRENCIES
from .legacy import LegacyNotificationAdapter

__all__ = [
    # statuts
    "PaymentStatus",
    "map_status",
    # payload
    "build_checkout_payload",
    "validate_order_total",
    "amounts_match",
    # paypal
    "PayPalClient",
    "parse_nvp",
    "is_success",
    # erreurs
    "PaymentError",
    "TransportError",
    "CheckoutAbort",
    "OrderTotalMismatch",
    "AmountPrecisionError",
    # machine d'état
    "CheckoutOutcome",
    "InitiateRequest",
    "ReturnRequest",
    "CancelRequest",
    "NotifyRequest",
    "LegacyNotifyRequest",
    "PayPalCheckout",
    "SUPPORTED_CURRENCIES",
    "LegacyNotificationAdapter",
]
