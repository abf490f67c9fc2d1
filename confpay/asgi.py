"""
ASGI entrypoint: `confpay.asgi:app` pour uvicorn/gunicorn en production.
La construction de l'application est centralisée dans confpay.app_setup.factory.
"""

from confpay.app import app

__all__ = ["app"]
