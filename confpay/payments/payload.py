"""
Construction des champs PayPal (lignes + montants) à partir d'une commande.
Fonctions pures: la même commande produit toujours le même payload, ce qui permet
de recalculer le total au retour navigateur et de le comparer à celui de PayPal.
"""
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from confpay.orders.models import Order
from .errors import AmountPrecisionError, OrderTotalMismatch

# Limite de longueur des champs L_PAYMENTREQUEST_0_NAME/DESC côté PayPal
MAX_FIELD_LENGTH = 127

# Devises sans décimales acceptées par PayPal
ZERO_DECIMAL_CURRENCIES = {"JPY", "HUF", "TWD"}

# module confpay.payments.payload
def truncate(value: Optional[str], length: int = MAX_FIELD_LENGTH) -> str:
    """Coupe net (sans ellipse) à `length` caractères."""
    return (value or "")[:length]

def format_amount(amount: Decimal, currency: str) -> str:
    """
    Formate un montant pour l'API NVP: 2 décimales, 0 pour JPY & co.
    - Soulève AmountPrecisionError si le montant perdrait des chiffres (aucun arrondi).
    """
    places = 0 if (currency or "").upper() in ZERO_DECIMAL_CURRENCIES else 2
    amount = Decimal(amount)
    rounded = amount.quantize(Decimal(1).scaleb(-places))
    if rounded != amount:
        raise AmountPrecisionError(amount, rounded, currency)
    return str(rounded)

def items_total(order: Order) -> Decimal:
    return sum((item.price * item.quantity for item in order.items), Decimal("0"))

def validate_order_total(order: Order) -> None:
    """
    Vérifie l'invariant total == somme(prix x quantité).
    - Soulève OrderTotalMismatch sinon (le total n'est jamais supposé correct).
    """
    computed = items_total(order)
    if computed != order.total:
        raise OrderTotalMismatch(order.total, computed)

def build_checkout_payload(order: Order, event_label: str, currency: str) -> Dict[str, Any]:
    """
    Construit les champs commande d'une requête SetExpressCheckout/DoExpressCheckoutPayment.
    - Par ligne i: NAME (libellé événement + nom, tronqué), DESC (tronqué), NUMBER, AMT, QTY.
    - Puis ITEMAMT, AMT (total) et CURRENCYCODE.
    - Soulève OrderTotalMismatch (ou AmountPrecisionError) plutôt que d'envoyer un montant faux.
    """
    validate_order_total(order)

    payload: Dict[str, Any] = {}
    for i, item in enumerate(order.items):
        payload[f"L_PAYMENTREQUEST_0_NAME{i}"] = truncate(f"{event_label}: {item.name}")
        payload[f"L_PAYMENTREQUEST_0_DESC{i}"] = truncate(item.description)
        payload[f"L_PAYMENTREQUEST_0_NUMBER{i}"] = item.id
        payload[f"L_PAYMENTREQUEST_0_AMT{i}"] = format_amount(item.price, currency)
        payload[f"L_PAYMENTREQUEST_0_QTY{i}"] = item.quantity

    total = format_amount(order.total, currency)
    payload["PAYMENTREQUEST_0_ITEMAMT"] = total
    payload["PAYMENTREQUEST_0_AMT"] = total
    payload["PAYMENTREQUEST_0_CURRENCYCODE"] = currency
    return payload

def amounts_match(reported: Any, expected: Any) -> bool:
    """
    Compare deux montants décimaux à l'identique ("50.00" == "50").
    - Un montant absent ou illisible ne correspond jamais.
    """
    if reported is None or expected is None:
        return False
    try:
        return Decimal(str(reported).strip()) == Decimal(str(expected).strip())
    except (InvalidOperation, ValueError):
        return False
