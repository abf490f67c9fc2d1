"""
Accès aux données d'inscription (tables orders, attendees, tickets) via Supabase.
Implémente le contrat OrderSystem consommé par le checkout PayPal.
- Lectures: tolérantes (None / False en cas d'erreur, avec log).
- Écritures: apply_payment_result journalise puis propage l'erreur.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import confpay.infra.supabase_client as supabase_client
from confpay.config import TIX_CURRENCY, TIX_EVENT_NAME, TICKETS_PAGE_URL
from confpay.orders.models import Order
from confpay.payments.statuses import PaymentStatus

logger = logging.getLogger(__name__)

# Une commande ne peut être débitée que tant qu'elle n'a pas été résolue
CHARGEABLE_STATUSES = {"draft", "pending"}
TERMINAL_STATUSES = {
    PaymentStatus.COMPLETED.value,
    PaymentStatus.CANCELLED.value,
    PaymentStatus.FAILED.value,
    PaymentStatus.REFUNDED.value,
}

# Paiement encaissé: seul un statut re-lu chez PayPal (IPN) peut encore le faire évoluer
SETTLED_STATUSES = {PaymentStatus.COMPLETED.value, PaymentStatus.REFUNDED.value}

def is_stale_update(current_status: Optional[str], new_status: PaymentStatus) -> bool:
    """
    True si le nouveau statut ne doit pas remplacer celui enregistré:
    - pending n'écrase jamais un statut terminal;
    - cancelled/failed (signaux navigateur rejoués, token expiré) n'écrasent jamais
      un paiement encaissé (completed, refunded).
    """
    current = getattr(current_status, "value", current_status)
    if new_status is PaymentStatus.PENDING:
        return current in TERMINAL_STATUSES
    if new_status in (PaymentStatus.CANCELLED, PaymentStatus.FAILED):
        return current in SETTLED_STATUSES
    return False

# module confpay.orders.repository
class SupabaseOrderSystem:
    def __init__(
        self,
        currency: str = TIX_CURRENCY,
        event_name: str = TIX_EVENT_NAME,
        tickets_page_url: str = TICKETS_PAGE_URL,
    ):
        self.currency = currency
        self.event_name = event_name
        self.tickets_page_url = tickets_page_url

    def _fetch_order_row(self, payment_token: str) -> Optional[dict]:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("id, payment_token, items, total, currency, status")
            .eq("payment_token", payment_token)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None

    def get_order(self, payment_token: str) -> Optional[Order]:
        """
        Charge la commande liée au payment token.
        - Retourne None si absente, invalide ou en cas d'erreur Supabase.
        """
        if not payment_token:
            return None
        try:
            row = self._fetch_order_row(payment_token)
            if not row:
                return None
            return Order.model_validate(row)
        except Exception:
            logger.exception("orders.repository.get_order failed payment_token=%s", payment_token)
            return None

    def _fetch_tickets(self, ids: List[str]) -> List[dict]:
        if not ids:
            return []
        res = (
            supabase_client.get_service_supabase()
            .table("tickets")
            .select("id, remaining")
            .in_("id", ids)
            .execute()
        )
        return res.data or []

    def verify_order_still_available(self, order: Order) -> bool:
        """
        Dernière vérification avant débit:
        - la commande existe toujours et n'est pas déjà résolue (protection double débit);
        - chaque billet a encore assez de places (remaining NULL = illimité).
        """
        try:
            row = self._fetch_order_row(order.payment_token)
            if not row or (row.get("status") or "draft") not in CHARGEABLE_STATUSES:
                return False

            wanted: Dict[str, int] = {}
            for item in order.items:
                wanted[item.id] = wanted.get(item.id, 0) + item.quantity
            tickets = {str(t.get("id")): t for t in self._fetch_tickets(list(wanted.keys()))}
            for ticket_id, qty in wanted.items():
                ticket = tickets.get(ticket_id)
                if ticket is None:
                    return False
                remaining = ticket.get("remaining")
                if remaining is not None and int(remaining) < qty:
                    return False
            return True
        except Exception:
            logger.exception("orders.repository.verify_order_still_available failed order_id=%s", order.id)
            return False

    def apply_payment_result(
        self,
        payment_token: str,
        status: PaymentStatus,
        payment_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Applique un résultat de paiement (idempotent, rejouable dans n'importe quel ordre).
        - Un résultat périmé (voir is_stale_update) est ignoré.
        - Sinon, dernière écriture gagnante sur orders puis attendees.
        """
        payment_data = payment_data or {}
        status = PaymentStatus(status)
        try:
            current = self._fetch_order_row(payment_token)
            current_status = (current or {}).get("status")
            if is_stale_update(current_status, status):
                logger.info(
                    "orders.repository.apply_payment_result skipped payment_token=%s current=%s new=%s",
                    payment_token, current_status, status.value,
                )
                return

            update: Dict[str, Any] = {
                "status": status.value,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
            attendee_update: Dict[str, Any] = {"status": status.value}
            if payment_data.get("transaction_id"):
                update["transaction_id"] = payment_data["transaction_id"]
                update["transaction_details"] = payment_data.get("transaction_details") or {}
                attendee_update["transaction_id"] = payment_data["transaction_id"]
            if payment_data.get("error_code") is not None:
                update["payment_error_code"] = str(payment_data["error_code"])

            client = supabase_client.get_service_supabase()
            client.table("orders").update(update).eq("payment_token", payment_token).execute()
            client.table("attendees").update(attendee_update).eq("payment_token", payment_token).execute()
        except Exception:
            logger.exception(
                "orders.repository.apply_payment_result failed payment_token=%s status=%s",
                payment_token, status.value,
            )
            raise

    def find_order_by_transaction_id(self, transaction_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrouve le participant le plus récent portant ce transaction id (IPN ancien format).
        """
        if not transaction_id:
            return None
        try:
            res = (
                supabase_client.get_service_supabase()
                .table("attendees")
                .select("id, payment_token, transaction_id, created_at")
                .eq("transaction_id", transaction_id)
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
            rows = res.data or []
            return rows[0] if rows else None
        except Exception:
            logger.exception("orders.repository.find_order_by_transaction_id failed transaction_id=%s", transaction_id)
            return None

    def get_stored_payment_token(self, record: Dict[str, Any]) -> Optional[str]:
        token = str((record or {}).get("payment_token") or "").strip()
        return token or None

    def get_configured_currency(self) -> str:
        return self.currency

    def get_event_name(self) -> str:
        return self.event_name

    def get_tickets_page_url(self) -> str:
        return self.tickets_page_url
