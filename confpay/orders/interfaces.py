"""
Contrat consommé auprès du système d'inscription (collaborateur externe).

apply_payment_result doit être idempotent: un même résultat peut arriver deux fois
(retour navigateur puis IPN, ou IPN rejouée par PayPal), dans n'importe quel ordre.
"""
from typing import Any, Dict, Optional, Protocol

from confpay.orders.models import Order
from confpay.payments.statuses import PaymentStatus


class OrderSystem(Protocol):
    def get_order(self, payment_token: str) -> Optional[Order]:
        ...

    def verify_order_still_available(self, order: Order) -> bool:
        ...

    def apply_payment_result(
        self,
        payment_token: str,
        status: PaymentStatus,
        payment_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        ...

    def find_order_by_transaction_id(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        ...

    def get_stored_payment_token(self, record: Dict[str, Any]) -> Optional[str]:
        ...

    def get_configured_currency(self) -> str:
        ...

    def get_event_name(self) -> str:
        ...

    def get_tickets_page_url(self) -> str:
        ...
