from typing import Any, Dict
from fastapi import Request, Response, HTTPException
import os
import time

def _client_key(request: Request, scope: str) -> str:
    # Pas de session utilisateur sur les retours PayPal: clé par IP + périmètre
    ip = request.client.host if request.client else "local"
    return f"ip:{ip}:{scope}"

async def check_rate_limit(request: Request, times: int, seconds: int, scope: str = "") -> None:
    """
    Applique la limite (times requêtes / seconds) pour la clé IP + scope.
    - LOCAL_RATE_LIMIT_FALLBACK=1: compteur mémoire dans app.state (dev).
    - rate_limit_enabled=False (lifespan): aucune limite.
    - Sinon fastapi-limiter (Redis); une erreur du limiteur ne bloque jamais la requête.
    """
    key = _client_key(request, scope or request.url.path)

    if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
        now = time.time()
        store = getattr(request.app.state, "_rl_store", {})
        hits = [t for t in store.get(key, []) if now - t < seconds]
        if len(hits) >= times:
            raise HTTPException(status_code=429, detail="Too Many Requests")
        hits.append(now)
        store[key] = hits
        request.app.state._rl_store = store
        return

    if getattr(request.app.state, "rate_limit_enabled", None) is False:
        return

    try:
        from fastapi_limiter.depends import RateLimiter
    except Exception:
        return

    async def _identifier(req: Request) -> str:
        return key

    try:
        await RateLimiter(times=times, seconds=seconds, identifier=_identifier)(request, Response())
    except HTTPException:
        raise
    except Exception:
        # Limiteur indisponible (Redis, script non supporté): pas de 429
        return

def rate_limit_health_info(request: Request) -> Dict[str, Any]:
    enabled = getattr(request.app.state, "rate_limit_enabled", None)
    limiter_ready = False
    try:
        from fastapi_limiter import FastAPILimiter
        limiter_ready = getattr(FastAPILimiter, "redis", None) is not None
    except Exception:
        limiter_ready = False
    return {
        "enabled": (bool(enabled) if enabled is not None else None),
        "ready": limiter_ready,
        "backend": "redis" if limiter_ready else None,
    }
