"""
Cas d'usage 'payments': checkout PayPal Express en quatre points d'entrée.

- initiate: SetExpressCheckout puis redirection vers PayPal.
- payment_return: retour navigateur après "Payer"; re-lecture du checkout, contrôle du
  montant et de la disponibilité, puis DoExpressCheckoutPayment (le débit).
- payment_cancel: l'acheteur a abandonné chez PayPal.
- payment_notify: IPN serveur à serveur, validée puis confirmée par GetTransactionDetails.

Chaque appel est autonome: l'état est reconstruit à partir du payment token, de la
commande et de PayPal (seule source de vérité). Aucun dédoublonnage n'est fait ici:
retour navigateur et IPN peuvent appliquer le même résultat deux fois, le système
d'inscription l'applique de manière idempotente.
"""
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional
import logging

from confpay.audit.sink import AuditLog
from confpay.orders.models import Order
from .checkout_state import CheckoutSession, CheckoutState
from .errors import OrderTotalMismatch, TransportError
from .notifications import resolve_transaction_id
from .outcomes import CheckoutOutcome
from .payload import amounts_match, build_checkout_payload
from .paypal_client import PayPalClient, is_success
from .requests import CancelRequest, InitiateRequest, NotifyRequest, ReturnRequest
from .statuses import PaymentStatus, map_status
from .urls import CallbackUrls

if TYPE_CHECKING:
    from confpay.orders.interfaces import OrderSystem

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("USD", "EUR", "CAD", "NOK", "PLN", "JPY", "GBP")

# TODO: exposer un réglage pour accepter les eChecks (paiements différés)
ALLOWED_PAYMENT_METHOD = "InstantPaymentOnly"

UNSUPPORTED_CURRENCY = "The selected currency is not supported by this payment method."
ORDER_NOT_FOUND = "could not find order"
UNEXPECTED_TOTAL = "Unexpected total!"
ORDER_UNAVAILABLE = "Something went wrong, order is no longer available."


class PayPalCheckout:
    """
    Machine d'état de réconciliation d'un checkout PayPal.
    Collaborateurs injectés: client PayPal, système d'inscription, journal d'audit.
    """

    def __init__(
        self,
        gateway: PayPalClient,
        orders: "OrderSystem",
        audit: Optional[AuditLog] = None,
        urls: Optional[CallbackUrls] = None,
        supported_currencies: Iterable[str] = SUPPORTED_CURRENCIES,
    ):
        self.gateway = gateway
        self.orders = orders
        self.audit = audit or AuditLog()
        self.urls = urls or CallbackUrls(orders.get_tickets_page_url())
        self.supported_currencies = tuple(c.upper() for c in supported_currencies)

    # --- helpers ---

    def _currency_for(self, order: Order) -> str:
        return (order.currency or self.orders.get_configured_currency() or "").upper()

    def _call(self, payload: Dict[str, Any]) -> Dict[str, str]:
        """Appel NVP; un échec réseau est traité comme une réponse en échec (pas de retry)."""
        try:
            return self.gateway.request(payload)
        except TransportError:
            return {}

    def _apply(
        self,
        session: CheckoutSession,
        status: PaymentStatus,
        payment_data: Optional[Dict[str, Any]] = None,
    ) -> CheckoutOutcome:
        self.orders.apply_payment_result(session.payment_token, status, payment_data)
        session.advance(CheckoutState.RESOLVED)
        return CheckoutOutcome.result(session.payment_token, status, payment_data, state=session.state)

    def _abort(self, session: CheckoutSession, event: str, message: str, status_code: int,
               data: Any = None) -> CheckoutOutcome:
        self.audit.warning(event, message, payment_token=session.payment_token, state=session.state, data=data)
        return CheckoutOutcome.abort(message, status_code, payment_token=session.payment_token, state=session.state)

    def _ignore(self, session: CheckoutSession, event: str, message: str,
                transaction_id: Optional[str] = None, data: Any = None) -> CheckoutOutcome:
        self.audit.warning(
            event, message,
            payment_token=session.payment_token, transaction_id=transaction_id, state=session.state, data=data,
        )
        return CheckoutOutcome.ignored(message, payment_token=session.payment_token, state=session.state)

    # --- points d'entrée ---

    def initiate(self, req: InitiateRequest) -> CheckoutOutcome:
        """
        Démarre le checkout: SetExpressCheckout puis redirection vers PayPal.
        - Devise non supportée ou commande introuvable: arrêt fatal (aucun appel PayPal).
        - ACK != Success: statut failed appliqué avec le code d'erreur PayPal, pas de redirection.
        """
        session = CheckoutSession(req.payment_token, CheckoutState.INITIATED)
        order = self.orders.get_order(req.payment_token)
        if order is None:
            return self._abort(session, "checkout.order_not_found", ORDER_NOT_FOUND, 404)

        currency = self._currency_for(order)
        if currency not in self.supported_currencies:
            return self._abort(session, "checkout.unsupported_currency", UNSUPPORTED_CURRENCY, 400,
                               data={"currency": currency})

        try:
            order_fields = build_checkout_payload(order, self.orders.get_event_name(), currency)
        except OrderTotalMismatch as e:
            return self._abort(session, "checkout.order_total_mismatch", UNEXPECTED_TOTAL, 409,
                               data={"expected": str(e.expected), "computed": str(e.computed)})

        payload: Dict[str, Any] = {
            "METHOD": "SetExpressCheckout",
            "PAYMENTREQUEST_0_PAYMENTACTION": "Sale",
            "PAYMENTREQUEST_0_ALLOWEDPAYMENTMETHOD": ALLOWED_PAYMENT_METHOD,
            "RETURNURL": self.urls.return_url(req.payment_token),
            "CANCELURL": self.urls.cancel_url(req.payment_token),
            "ALLOWNOTE": 0,
            "NOSHIPPING": 1,
            "SOLUTIONTYPE": "Sole",
        }
        payload.update(order_fields)

        response = self._call(payload)
        gateway_token = response.get("TOKEN")
        if is_success(response) and gateway_token:
            session.advance(CheckoutState.AWAITING_RETURN)
            self.audit.record("checkout.initiated", "SetExpressCheckout succeeded",
                              payment_token=req.payment_token, state=session.state, data=response)
            return CheckoutOutcome.redirect(req.payment_token, self.gateway.checkout_url(gateway_token),
                                            state=session.state)

        error_code = response.get("L_ERRORCODE0") or "0"
        self.audit.warning("checkout.initiate_failed", "Error during SetExpressCheckout.",
                           payment_token=req.payment_token, state=session.state, data=response)
        return self._apply(session, PaymentStatus.FAILED, {"error_code": error_code})

    def payment_return(self, req: ReturnRequest) -> CheckoutOutcome:
        """
        Retour navigateur depuis PayPal: l'acheteur n'est pas encore débité.
        Étapes:
          1) commande introuvable => arrêt fatal
          2) GetExpressCheckoutDetails (on ne fait jamais confiance au navigateur)
          3) montant PayPal == total recalculé, sinon arrêt fatal sans débit
          4) commande toujours disponible, sinon arrêt fatal sans débit
          5) DoExpressCheckoutPayment avec l'URL de notification (IPN)
        """
        session = CheckoutSession(req.payment_token, CheckoutState.AWAITING_RETURN)
        order = self.orders.get_order(req.payment_token)
        if order is None:
            return self._abort(session, "return.order_not_found", ORDER_NOT_FOUND, 404)

        details = self._call({"METHOD": "GetExpressCheckoutDetails", "TOKEN": req.gateway_token})
        if not is_success(details):
            self.audit.warning("return.details_failed", "Error during GetExpressCheckoutDetails.",
                               payment_token=req.payment_token, state=session.state, data=details)
            return self._apply(session, PaymentStatus.FAILED)

        currency = self._currency_for(order)
        try:
            order_fields = build_checkout_payload(order, self.orders.get_event_name(), currency)
        except OrderTotalMismatch as e:
            return self._abort(session, "return.order_total_mismatch", UNEXPECTED_TOTAL, 409,
                               data={"expected": str(e.expected), "computed": str(e.computed)})

        reported_amount = details.get("PAYMENTREQUEST_0_AMT")
        reported_currency = details.get("PAYMENTREQUEST_0_CURRENCYCODE")
        if not amounts_match(reported_amount, order.total) or (
            reported_currency and reported_currency != currency
        ):
            return self._abort(session, "return.amount_mismatch", UNEXPECTED_TOTAL, 409, data={
                "reported_amount": reported_amount,
                "reported_currency": reported_currency,
                "expected_amount": str(order.total),
                "expected_currency": currency,
            })

        # Dernière vérification avant de débiter l'acheteur
        if not self.orders.verify_order_still_available(order):
            return self._abort(session, "return.order_unavailable", ORDER_UNAVAILABLE, 409)

        session.advance(CheckoutState.CHARGING)
        payload: Dict[str, Any] = {
            "METHOD": "DoExpressCheckoutPayment",
            "PAYMENTREQUEST_0_ALLOWEDPAYMENTMETHOD": ALLOWED_PAYMENT_METHOD,
            "TOKEN": req.gateway_token,
            "PAYERID": req.payer_id,
            "PAYMENTREQUEST_0_NOTIFYURL": self.urls.notify_url(req.payment_token),
        }
        payload.update(order_fields)

        txn = self._call(payload)
        if is_success(txn) and txn.get("PAYMENTINFO_0_PAYMENTSTATUS"):
            txn_id = txn.get("PAYMENTINFO_0_TRANSACTIONID")
            self.audit.record("return.charged", f"Payment details for {txn_id}",
                              payment_token=req.payment_token, transaction_id=txn_id,
                              state=session.state, data=txn)
            payment_data = {
                "transaction_id": txn_id,
                "transaction_details": {"raw": txn},
            }
            return self._apply(session, map_status(txn["PAYMENTINFO_0_PAYMENTSTATUS"]), payment_data)

        self.audit.warning("return.charge_failed", "Error during DoExpressCheckoutPayment.",
                           payment_token=req.payment_token, state=session.state, data=txn)
        return self._apply(session, PaymentStatus.FAILED)

    def payment_cancel(self, req: CancelRequest) -> CheckoutOutcome:
        """
        Annulation chez PayPal: statut cancelled appliqué sans appel réseau.
        L'annulation est affirmée par la redirection elle-même.
        """
        session = CheckoutSession(req.payment_token, CheckoutState.AWAITING_RETURN)
        self.audit.record("cancel", "Payment cancelled by the buyer at PayPal",
                          payment_token=req.payment_token, state=session.state,
                          data={"token": req.gateway_token})
        return self._apply(session, PaymentStatus.CANCELLED)

    def payment_notify(self, req: NotifyRequest) -> CheckoutOutcome:
        """
        IPN PayPal (serveur à serveur), rejouable sans risque.
        - IPN non vérifiée, sans payment_status, sans transaction id ou re-lecture en échec:
          écartée silencieusement (journalisée), jamais d'erreur renvoyée à PayPal.
        - Le statut vient de GetTransactionDetails, pas du corps de l'IPN (course avec le retour).
        """
        session = CheckoutSession(req.payment_token, CheckoutState.CHARGING)
        if not self.gateway.verify_notification(req.raw_body):
            return self._ignore(session, "notify.unverified", "Could not verify PayPal IPN.", data=req.fields)

        txn_id = resolve_transaction_id(req.fields)
        if not req.fields.get("payment_status"):
            return self._ignore(session, "notify.no_status", f"Received IPN with no payment status {txn_id}",
                                transaction_id=txn_id, data=req.fields)
        if not txn_id:
            return self._ignore(session, "notify.no_transaction", "Received IPN with no transaction id",
                                data=req.fields)

        details = self._call({"METHOD": "GetTransactionDetails", "TRANSACTIONID": txn_id})
        if not is_success(details):
            return self._ignore(session, "notify.details_failed", f"Fetching transaction after IPN failed {txn_id}",
                                transaction_id=txn_id, data=details)

        self.audit.record("notify.applied", f"Payment details for {txn_id} via IPN",
                          payment_token=req.payment_token, transaction_id=txn_id,
                          state=session.state, data=details)
        payment_data = {
            "transaction_id": txn_id,
            "transaction_details": {"raw": details},
        }
        return self._apply(session, map_status(details.get("PAYMENTSTATUS")), payment_data)
