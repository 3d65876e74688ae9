# storefront.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

TEMPLATES_DIR = Path(__file__).resolve().parent / "notifications" / "templates"

"""
Configuration centrale de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Resend)
- Expose les bornes du checkout et la durée de vie du cache produit
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _float_env(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    try:
        return float(raw) if raw else default
    except ValueError:
        return default

# Supabase: URL et clés (anon pour la lecture, service pour les écritures)
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Stripe: clé secrète et secret de signature des webhooks
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")

# Checkout: bornes inclusives du montant (unités monétaires majeures)
CHECKOUT_CURRENCY = "USD"
CHECKOUT_MIN_AMOUNT = _float_env("CHECKOUT_MIN_AMOUNT", 0.50)
CHECKOUT_MAX_AMOUNT = _float_env("CHECKOUT_MAX_AMOUNT", 100000.0)

# Emails transactionnels (API Resend)
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
RESEND_API_URL = _clean_env(os.getenv("RESEND_API_URL") or "https://api.resend.com/emails")
EMAIL_FROM = _clean_env(os.getenv("EMAIL_FROM") or "SafeHeat <orders@safeheat.com>")
STORE_NAME = _clean_env(os.getenv("STORE_NAME") or "SafeHeat")
FEATURED_PRODUCT_SLUG = _clean_env(os.getenv("FEATURED_PRODUCT_SLUG") or "safeheat-propane-heater")

# URL publique de la boutique (liens des emails, fallback si pas d'en-tête Origin)
APP_URL = _clean_env(os.getenv("APP_URL") or "http://localhost:8000").rstrip("/")

# Jeton partagé pour les mises à jour de statut (back-office)
ADMIN_API_TOKEN = _clean_env(os.getenv("ADMIN_API_TOKEN") or "")

# Cache lecture des produits (secondes)
PRODUCT_CACHE_TTL_SECONDS = _float_env("PRODUCT_CACHE_TTL_SECONDS", 60.0)

# Cookies / CORS / hosts
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Rate limiting du checkout (fastapi-limiter)
RATE_LIMIT_REDIS_URL = _clean_env(os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/0")
RATE_LIMIT_PREFIX = _clean_env(os.getenv("RATE_LIMIT_PREFIX") or "storefront-rl")
