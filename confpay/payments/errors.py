"""
Exceptions du domaine paiement.
- TransportError: aucune réponse exploitable de PayPal (réseau, timeout).
- CheckoutAbort: arrêt fatal d'une requête navigateur (aucune mutation de commande).
- OrderTotalMismatch: total de commande incohérent avec ses lignes.
- AmountPrecisionError: montant qui perdrait des chiffres à la précision de la devise.
"""


class PaymentError(Exception):
    pass


class TransportError(PaymentError):
    """Échec réseau vers PayPal: à distinguer d'une réponse ACK != Success."""


class CheckoutAbort(PaymentError):
    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class OrderTotalMismatch(PaymentError, ValueError):
    def __init__(self, expected, computed, message=None):
        super().__init__(message or f"Order total {expected} does not match line items sum {computed}")
        self.expected = expected
        self.computed = computed


class AmountPrecisionError(OrderTotalMismatch):
    """Montant non exprimable à la précision de la devise (ex: 100.5 JPY): jamais arrondi."""

    def __init__(self, amount, rounded, currency: str):
        super().__init__(amount, rounded, f"Amount {amount} cannot be sent in {currency} without rounding")
        self.currency = currency
