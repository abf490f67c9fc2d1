"""
Journal d'audit des paiements.
Chaque événement significatif (succès, échec, incohérence de montant, IPN écartée...)
est écrit dans le logger `confpay.audit` puis transmis à un store (Supabase, mémoire ou aucun)
avec les identifiants de corrélation (payment token, transaction id, état du checkout).
- Les identifiants API PayPal (USER, PWD, SIGNATURE) ne sont jamais conservés.
- Un store en erreur ne fait jamais échouer le paiement (journalisé seulement).
"""
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Mapping, Optional
import logging

REDACTED_FIELDS = {"USER", "PWD", "SIGNATURE"}
REDACTED = "***"

AuditStore = Callable[[Dict[str, Any]], Any]


def redact(data: Any) -> Any:
    if isinstance(data, Mapping):
        return {k: (REDACTED if k in REDACTED_FIELDS else redact(v)) for k, v in data.items()}
    if isinstance(data, (list, tuple)):
        return [redact(v) for v in data]
    return data


class MemoryAuditStore:
    """Store en mémoire borné (dev sans Supabase, tests)."""

    def __init__(self, maxlen: int = 1000):
        self._entries: Deque[Dict[str, Any]] = deque(maxlen=maxlen)

    def __call__(self, entry: Dict[str, Any]) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> List[Dict[str, Any]]:
        return list(self._entries)

    def events(self) -> List[str]:
        return [e["event"] for e in self._entries]

    def clear(self) -> None:
        self._entries.clear()


class AuditLog:
    def __init__(self, store: Optional[AuditStore] = None, logger_name: str = "confpay.audit"):
        self.store = store
        self.logger = logging.getLogger(logger_name)

    def record(
        self,
        event: str,
        message: str,
        *,
        payment_token: Optional[str] = None,
        transaction_id: Optional[str] = None,
        state: Any = None,
        data: Any = None,
        level: int = logging.INFO,
    ) -> Dict[str, Any]:
        entry: Dict[str, Any] = {
            "event": event,
            "message": message,
            "payment_token": payment_token,
            "transaction_id": transaction_id,
            "state": getattr(state, "value", state),
            "data": redact(data),
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        self.logger.log(
            level,
            "%s %s payment_token=%s transaction_id=%s state=%s",
            event, message, payment_token, transaction_id, entry["state"],
        )
        if self.store is not None:
            try:
                self.store(entry)
            except Exception:
                self.logger.exception("audit.store failed event=%s payment_token=%s", event, payment_token)
        return entry

    def warning(self, event: str, message: str, **kwargs: Any) -> Dict[str, Any]:
        return self.record(event, message, level=logging.WARNING, **kwargs)
