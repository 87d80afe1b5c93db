# storefront.config
from decimal import Decimal
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=False)

"""
Configuration centrale du backend de la boutique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, PayPal, Stripe, Discord)
- Paramètres du flux de paiement (devise, epsilon de rapprochement, garde d'unicité)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _flag(name: str, default: str) -> bool:
    return _clean_env(os.getenv(name, default)).lower() in ("1", "true", "yes", "on")

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("VITE_SUPABASE_URL") or "")
SUPABASE_ANON_KEY = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Sécurité / HTTP
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Prestataire de paiement: "paypal" (défaut) ou "stripe"
PAYMENT_PROVIDER = _clean_env(os.getenv("PAYMENT_PROVIDER") or "paypal").lower()
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "USD").upper()
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "15"))

# PayPal REST (sandbox par défaut)
PAYPAL_CLIENT_ID = _clean_env(os.getenv("PAYPAL_CLIENT_ID") or "")
PAYPAL_SECRET = _clean_env(os.getenv("PAYPAL_SECRET") or "")
PAYPAL_API_BASE = _clean_env(os.getenv("PAYPAL_API_BASE") or "https://api-m.sandbox.paypal.com").rstrip("/")

# Stripe: clés publique/privée
STRIPE_PUBLIC_KEY = _clean_env(os.getenv("STRIPE_PUBLIC_KEY") or "")
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")

# Rapprochement montant capturé / total recalculé (unités monétaires)
AMOUNT_EPSILON = Decimal(_clean_env(os.getenv("AMOUNT_EPSILON") or "0.01"))

# Garde locale: une seule commande par identifiant de commande prestataire.
# Désactivée, l'unicité repose uniquement sur la capture côté prestataire.
ORDER_UNIQUE_PROVIDER_ORDER = _flag("ORDER_UNIQUE_PROVIDER_ORDER", "true")

# Notifications de visite (webhook Discord)
DISCORD_WEBHOOK_URL = _clean_env(os.getenv("DISCORD_WEBHOOK_URL") or "")
VISIT_FOOTER_TEXT = os.getenv("VISIT_FOOTER_TEXT", "SOL Apparel Analytics")

# Rate limiting (fastapi-limiter)
RATE_LIMIT_REDIS_URL = _clean_env(os.getenv("RATE_LIMIT_REDIS_URL") or "redis://127.0.0.1:6379/0")
