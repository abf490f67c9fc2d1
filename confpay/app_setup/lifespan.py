"""
Lifespan FastAPI du service de paiement.

Démarrage:
  - rate limiting de l'initiation du checkout (fastapi-limiter sur Redis);
  - rappel du mode PayPal effectif (sandbox/live) et alerte si identifiants absents.
Arrêt:
  - fermeture du client httpx PayPal.

Variables d'environnement (tests/dev):
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: aucun limiteur
  - USE_FAKE_REDIS_FOR_TESTS=1: Redis en mémoire (fakeredis)
  - LOCAL_RATE_LIMIT_FALLBACK=1: compteur local si Redis est injoignable
  - RATE_LIMIT_REDIS_URL: URL Redis (par défaut redis://127.0.0.1:6379/0)
"""
import os
import logging
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from confpay.payments.dependencies import close_gateway, get_paypal_options

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except Exception:
    FakeRedis = None

logger = logging.getLogger("uvicorn.error")

def _redis_connection():
    if os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1":
        if not FakeRedis:
            raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
        return FakeRedis(decode_responses=True)
    url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
    return redis.from_url(url, encoding="utf-8", decode_responses=True)

async def _init_rate_limiter(app: FastAPI) -> None:
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("payments.rate_limit disabled (DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS)")
        return
    try:
        await FastAPILimiter.init(_redis_connection())
        app.state.rate_limit_enabled = True
        logger.info("payments.rate_limit enabled")
    except Exception as e:
        # Redis absent: l'initiation reste ouverte, sauf fallback local explicite
        app.state.rate_limit_enabled = os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1"
        logger.warning("payments.rate_limit init failed error=%s local_fallback=%s", e, app.state.rate_limit_enabled)

def _log_paypal_mode() -> None:
    options = get_paypal_options()
    mode = "sandbox" if options.sandbox else "live"
    if not options.has_credentials:
        logger.warning("payments.paypal mode=%s sans identifiants API: les checkouts échoueront", mode)
    else:
        logger.info("payments.paypal mode=%s", mode)

@asynccontextmanager
async def lifespan(app: FastAPI):
    await _init_rate_limiter(app)
    _log_paypal_mode()
    yield
    close_gateway()
