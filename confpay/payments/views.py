import logging
from typing import Dict, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from starlette.status import HTTP_303_SEE_OTHER

from confpay.utils.rate_limit import check_rate_limit
from .dependencies import get_checkout, get_legacy_adapter
from .errors import CheckoutAbort
from .legacy import LegacyNotificationAdapter
from .notifications import decode_form_body
from .outcomes import REDIRECT, CheckoutOutcome
from .requests import (
    LegacyNotifyRequest,
    build_cancel_request,
    build_initiate_request,
    build_notify_request,
    build_return_request,
)
from .service import PayPalCheckout
from .urls import PAYMENT_METHOD

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tickets", tags=["Tickets / PayPal"])

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# module confpay.payments.views
async def _read_params(request: Request) -> Tuple[Dict[str, str], bytes, Dict[str, str]]:
    """
    Paramètres de la requête: corps form-encoded (IPN) + query string.
    - La query string (nos propres URLs de rappel) l'emporte sur le corps.
    - Le corps brut est conservé pour la validation IPN.
    """
    raw_body = b""
    fields: Dict[str, str] = {}
    if request.method == "POST":
        raw_body = await request.body()
        if FORM_CONTENT_TYPE in (request.headers.get("content-type") or "").lower():
            fields = decode_form_body(raw_body)
    params = {**fields, **dict(request.query_params)}
    return params, raw_body, fields

def _ack() -> PlainTextResponse:
    # PayPal attend un simple 200, quel que soit le sort de l'IPN
    return PlainTextResponse("OK", status_code=200)

def _browser_response(outcome: CheckoutOutcome, checkout: PayPalCheckout) -> Response:
    """Traduit un CheckoutOutcome en réponse pour le navigateur."""
    if outcome.kind == REDIRECT:
        return RedirectResponse(url=outcome.url, status_code=HTTP_303_SEE_OTHER)
    if outcome.is_abort:
        return PlainTextResponse(outcome.message or "error", status_code=outcome.status_code)
    if outcome.is_result:
        url = checkout.urls.result_url(outcome.payment_token, outcome.status.value)
        return RedirectResponse(url=url, status_code=HTTP_303_SEE_OTHER)
    return PlainTextResponse(outcome.message or "", status_code=200)

@router.api_route("", methods=["GET", "POST"], include_in_schema=False)
async def tickets_payment_dispatch(
    request: Request,
    checkout: PayPalCheckout = Depends(get_checkout),
    legacy: LegacyNotificationAdapter = Depends(get_legacy_adapter),
):
    """
    Point d'entrée unique des flux PayPal sur la page billets.
    - tix_paypal_ipn=1: IPN ancien format (sans payment token).
    - tix_payment_method=paypal + tix_action:
      initiate | payment_return | payment_cancel | payment_notify
    - Erreurs navigateur: texte brut (CheckoutAbort); IPN: toujours 200 OK.
    """
    params, raw_body, fields = await _read_params(request)

    if params.get("tix_paypal_ipn") == "1":
        try:
            outcome = await run_in_threadpool(legacy.handle, LegacyNotifyRequest(raw_body=raw_body, fields=fields))
            logger.info("payments.legacy_notify outcome=%r", outcome)
        except Exception:
            logger.exception("Erreur legacy payment_notify")
        return _ack()

    if params.get("tix_payment_method") != PAYMENT_METHOD:
        raise HTTPException(status_code=404, detail="Payment method not handled")

    action = params.get("tix_action")
    if action == "payment_notify":
        try:
            req = build_notify_request(params, raw_body, fields)
        except CheckoutAbort:
            logger.warning("payments.notify ignored: empty payment token")
            return _ack()
        try:
            outcome = await run_in_threadpool(checkout.payment_notify, req)
            logger.info("payments.notify outcome=%r", outcome)
        except Exception:
            logger.exception("Erreur payment_notify payment_token=%s", req.payment_token)
        return _ack()

    if action == "initiate":
        await check_rate_limit(request, times=10, seconds=60, scope="paypal:initiate")
        outcome = await run_in_threadpool(checkout.initiate, build_initiate_request(params))
    elif action == "payment_return":
        outcome = await run_in_threadpool(checkout.payment_return, build_return_request(params))
    elif action == "payment_cancel":
        outcome = await run_in_threadpool(checkout.payment_cancel, build_cancel_request(params))
    else:
        raise HTTPException(status_code=404, detail="Unknown action")

    logger.info("payments.%s outcome=%r", action, outcome)
    return _browser_response(outcome, checkout)
