"""
Résultat étiqueté d'un point d'entrée du checkout.
Les handlers ne coupent jamais la requête eux-mêmes: ils renvoient un
CheckoutOutcome que la vue transforme en réponse HTTP.
- redirect: envoyer le navigateur vers `url` (page PayPal).
- abort: erreur fatale affichée telle quelle, aucune mutation de commande.
- result: un statut a été appliqué à la commande (status + payment_data).
- ignored: IPN écartée silencieusement (journalisée), simple accusé de réception.
"""
from typing import Any, Dict, Optional

from .checkout_state import CheckoutState
from .statuses import PaymentStatus

REDIRECT = "redirect"
ABORT = "abort"
RESULT = "result"
IGNORED = "ignored"


class CheckoutOutcome:
    def __init__(
        self,
        kind: str,
        payment_token: Optional[str] = None,
        url: Optional[str] = None,
        message: Optional[str] = None,
        status_code: int = 200,
        status: Optional[PaymentStatus] = None,
        payment_data: Optional[Dict[str, Any]] = None,
        state: Optional[CheckoutState] = None,
    ):
        self.kind = kind
        self.payment_token = payment_token
        self.url = url
        self.message = message
        self.status_code = status_code
        self.status = status
        self.payment_data = payment_data
        self.state = state

    @classmethod
    def redirect(cls, payment_token: str, url: str, state: Optional[CheckoutState] = None) -> "CheckoutOutcome":
        return cls(REDIRECT, payment_token=payment_token, url=url, status_code=303, state=state)

    @classmethod
    def abort(cls, message: str, status_code: int = 400, payment_token: Optional[str] = None,
              state: Optional[CheckoutState] = None) -> "CheckoutOutcome":
        return cls(ABORT, payment_token=payment_token, message=message, status_code=status_code, state=state)

    @classmethod
    def result(cls, payment_token: str, status: PaymentStatus, payment_data: Optional[Dict[str, Any]] = None,
               state: Optional[CheckoutState] = CheckoutState.RESOLVED) -> "CheckoutOutcome":
        return cls(RESULT, payment_token=payment_token, status=status, payment_data=payment_data, state=state)

    @classmethod
    def ignored(cls, message: str, payment_token: Optional[str] = None,
                state: Optional[CheckoutState] = None) -> "CheckoutOutcome":
        return cls(IGNORED, payment_token=payment_token, message=message, state=state)

    @property
    def is_abort(self) -> bool:
        return self.kind == ABORT

    @property
    def is_result(self) -> bool:
        return self.kind == RESULT

    def __repr__(self) -> str:
        return (
            f"CheckoutOutcome(kind={self.kind!r}, payment_token={self.payment_token!r}, "
            f"status={getattr(self.status, 'value', None)!r}, message={self.message!r})"
        )
