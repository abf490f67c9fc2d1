"""
Statuts canoniques de paiement et conversion depuis le vocabulaire PayPal.
"""
from enum import Enum
from typing import Dict, Optional


class PaymentStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    FAILED = "failed"
    REFUNDED = "refunded"


# Correspondance exacte (sensible à la casse) telle que renvoyée par PayPal
PAYPAL_STATUSES: Dict[str, PaymentStatus] = {
    "Completed": PaymentStatus.COMPLETED,
    "Pending": PaymentStatus.PENDING,
    "Cancelled": PaymentStatus.CANCELLED,
    "Failed": PaymentStatus.FAILED,
    "Denied": PaymentStatus.FAILED,
    "Refunded": PaymentStatus.REFUNDED,
    "Reversed": PaymentStatus.REFUNDED,
}


def map_status(provider_status: Optional[str]) -> PaymentStatus:
    """
    Convertit un statut PayPal en statut canonique.
    - Un statut inconnu (ou absent) donne PENDING: jamais un succès, jamais un échec définitif.
    """
    return PAYPAL_STATUSES.get(provider_status or "", PaymentStatus.PENDING)
