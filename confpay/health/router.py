from fastapi import APIRouter, Depends, Request

from confpay.payments.dependencies import get_paypal_options
from confpay.payments.options import PayPalOptions
from confpay.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/paypal")
def health_paypal(request: Request, options: PayPalOptions = Depends(get_paypal_options)):
    """Mode PayPal effectif (sandbox/live) et présence des identifiants, sans les exposer."""
    return {
        "mode": "sandbox" if options.sandbox else "live",
        "credentials": options.has_credentials,
        "rate_limit": rate_limit_health_info(request),
    }
