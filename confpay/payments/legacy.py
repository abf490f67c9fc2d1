"""
IPN ancien format (URL de notification ?tix_paypal_ipn=1, sans payment token).

Les commandes créées avant l'ajout du payment token dans l'URL de notification
reçoivent encore des IPN (remboursements, litiges...). On retrouve le token via
le participant qui porte le transaction id, puis on rejoue le flux IPN normal.
"""
import logging

from .outcomes import CheckoutOutcome
from .notifications import resolve_transaction_id
from .requests import LegacyNotifyRequest, NotifyRequest
from .service import PayPalCheckout

logger = logging.getLogger(__name__)


class LegacyNotificationAdapter:
    def __init__(self, checkout: PayPalCheckout):
        self.checkout = checkout
        self.orders = checkout.orders
        self.audit = checkout.audit

    def handle(self, req: LegacyNotifyRequest) -> CheckoutOutcome:
        """
        Résout le payment token puis délègue à PayPalCheckout.payment_notify.
        - Transaction id vide, participant introuvable ou sans token: IPN écartée (journalisée).
        - La validation IPN est faite par payment_notify sur le corps brut inchangé.
        """
        txn_id = resolve_transaction_id(req.fields)
        if not txn_id:
            self.audit.warning("legacy_notify.no_transaction",
                               "Received old-style IPN request with an empty transaction id.",
                               data=req.fields)
            return CheckoutOutcome.ignored("empty transaction id")

        record = self.orders.find_order_by_transaction_id(txn_id)
        if not record:
            self.audit.warning("legacy_notify.no_attendee",
                               "Received old-style IPN request. Could not match to attendee by transaction id.",
                               transaction_id=txn_id, data=req.fields)
            return CheckoutOutcome.ignored("no attendee for transaction")

        payment_token = self.orders.get_stored_payment_token(record)
        if not payment_token:
            self.audit.warning("legacy_notify.no_token",
                               "Received old-style IPN request. Could not find a payment token by transaction id.",
                               transaction_id=txn_id, data=req.fields)
            return CheckoutOutcome.ignored("no payment token for transaction")

        logger.info("payments.legacy resolved transaction_id=%s payment_token=%s", txn_id, payment_token)
        return self.checkout.payment_notify(
            NotifyRequest(payment_token=payment_token, raw_body=req.raw_body, fields=req.fields)
        )
