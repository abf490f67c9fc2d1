"""États d'une session de checkout PayPal et transitions autorisées."""
from enum import Enum
from typing import Dict, List, Set


class CheckoutState(str, Enum):
    INITIATED = "initiated"
    AWAITING_RETURN = "awaiting_return"
    CHARGING = "charging"
    RESOLVED = "resolved"


ALLOWED_TRANSITIONS: Dict[CheckoutState, Set[CheckoutState]] = {
    CheckoutState.INITIATED: {CheckoutState.AWAITING_RETURN, CheckoutState.RESOLVED},
    CheckoutState.AWAITING_RETURN: {CheckoutState.CHARGING, CheckoutState.RESOLVED},
    CheckoutState.CHARGING: {CheckoutState.RESOLVED},
    CheckoutState.RESOLVED: set(),
}


class InvalidTransition(ValueError):
    pass


def validate_transition(current: CheckoutState, new: CheckoutState) -> None:
    """Soulève InvalidTransition si la transition n'est pas prévue."""
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Invalid transition: {current.value} -> {new.value}")


class CheckoutSession:
    """
    Suivi de l'état d'un payment token pendant UNE requête.
    Rien n'est persisté: chaque point d'entrée reconstruit son état de départ
    (ex: un retour navigateur démarre en AWAITING_RETURN, une IPN en CHARGING).
    """

    def __init__(self, payment_token: str, state: CheckoutState = CheckoutState.INITIATED):
        self.payment_token = payment_token
        self.state = state
        self.history: List[CheckoutState] = [state]

    def advance(self, new: CheckoutState) -> None:
        validate_transition(self.state, new)
        self.state = new
        self.history.append(new)

    @property
    def resolved(self) -> bool:
        return self.state is CheckoutState.RESOLVED
