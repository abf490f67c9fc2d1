# confpay.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du service de paiement.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les identifiants PayPal (API NVP) et le mode sandbox
- Expose les réglages de l'inscription (nom de l'événement, devise, page billets)
- Expose Supabase (stockage des commandes/participants et du journal d'audit)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_flag(name: str, default: str = "false") -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes", "on")

# PayPal: identifiants de l'API NVP (Express Checkout)
PAYPAL_API_USERNAME = _clean_env(os.getenv("PAYPAL_API_USERNAME") or "")
PAYPAL_API_PASSWORD = _clean_env(os.getenv("PAYPAL_API_PASSWORD") or "")
PAYPAL_API_SIGNATURE = _clean_env(os.getenv("PAYPAL_API_SIGNATURE") or "")
# Sandbox activé par défaut: il faut explicitement PAYPAL_SANDBOX=false pour encaisser
PAYPAL_SANDBOX = _env_flag("PAYPAL_SANDBOX", "true")
PAYPAL_TIMEOUT = float(_clean_env(os.getenv("PAYPAL_TIMEOUT") or "20"))

# Inscription: libellé d'événement (préfixe des lignes PayPal) et devise configurée
TIX_EVENT_NAME = _clean_env(os.getenv("TIX_EVENT_NAME") or "Event")
TIX_CURRENCY = _clean_env(os.getenv("TIX_CURRENCY") or "USD").upper()

# URLs publiques: la page billets reçoit tous les retours PayPal (return/cancel/notify)
BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000").rstrip("/")
TICKETS_PAGE_URL = _clean_env(os.getenv("TICKETS_PAGE_URL") or f"{BASE_URL}/tickets")

# Supabase: URL et clé service (écritures côté serveur)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Journal d'audit: "supabase" (table payment_logs), "memory" ou "none"
AUDIT_LOG_BACKEND = _clean_env(os.getenv("AUDIT_LOG_BACKEND") or ("supabase" if SUPABASE_SERVICE_KEY else "memory")).lower()

# Hôtes acceptés (TrustedHost)
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "*").split(",") if h.strip()]
