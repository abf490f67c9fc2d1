"""
Gestionnaires d'exceptions utilisés par la factory.
- CheckoutAbort: erreur fatale du checkout, affichée en texte brut au navigateur.
- HTTPException: JSON FastAPI standard.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from confpay.payments.errors import CheckoutAbort

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CheckoutAbort)
    async def plain_text_on_checkout_abort(request: Request, exc: CheckoutAbort):
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(HTTPException)
    async def json_on_http_errors(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
