"""
Persistance du journal d'audit (table payment_logs) via Supabase.
"""
from typing import Any, Dict, Optional
import logging

import confpay.infra.supabase_client as supabase_client
from confpay.audit.sink import AuditLog, MemoryAuditStore

logger = logging.getLogger(__name__)

# module confpay.audit.repository
class SupabaseAuditStore:
    def __init__(self, table: str = "payment_logs"):
        self.table = table

    def __call__(self, entry: Dict[str, Any]) -> Optional[dict]:
        res = supabase_client.get_service_supabase().table(self.table).insert(entry).execute()
        rows = getattr(res, "data", None) or []
        return rows[0] if isinstance(rows, list) and rows else None

def build_audit_log(backend: str) -> AuditLog:
    """
    Construit le journal d'audit selon AUDIT_LOG_BACKEND.
    - "supabase": table payment_logs; "memory": deque locale; "none": logger seul.
    """
    backend = (backend or "").lower()
    if backend == "supabase":
        return AuditLog(SupabaseAuditStore())
    if backend == "memory":
        return AuditLog(MemoryAuditStore())
    if backend not in ("none", ""):
        logger.warning("audit.repository unknown backend=%s, using logger only", backend)
    return AuditLog(None)
