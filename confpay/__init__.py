"""confpay: paiement PayPal Express Checkout pour l'inscription aux conférences."""

__version__ = "0.1.0"
