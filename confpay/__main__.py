"""
Lance le service de paiement avec uvicorn: `python -m confpay`.

PORT (8000), HOST (0.0.0.0), LOG_LEVEL (info) et UVICORN_RELOAD ("1"/"true"/"yes", dev seulement).
PayPal appelle l'URL de notification depuis Internet: en local, exposer le port
(tunnel) et renseigner BASE_URL ou TICKETS_PAGE_URL avec l'adresse publique.
"""
import os

import uvicorn

def main() -> None:
    uvicorn.run(
        "confpay.asgi:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", 8000)),
        reload=os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes"),
        log_level=os.environ.get("LOG_LEVEL", "info"),
        proxy_headers=True,
    )

if __name__ == "__main__":
    main()
