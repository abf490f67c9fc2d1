"""
Factory d'application pour les entrypoints (confpay.app, confpay.asgi).
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares
from .exceptions import register_exception_handlers
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l'app FastAPI avec le lifespan et enregistre:
      - middlewares de base (hôtes, proxy)
      - gestionnaires d'exceptions (CheckoutAbort, HTTPException)
      - routers (paiements PayPal, health)
    """
    app = FastAPI(title="confpay", lifespan=lifespan)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
