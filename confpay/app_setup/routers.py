"""
Registre central des routers.
- Paiements: /tickets (retours PayPal, IPN, IPN ancien format)
- Health: /health
"""
from fastapi import FastAPI
from confpay.payments import views as payments_views
from confpay.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    app.include_router(health_router)
