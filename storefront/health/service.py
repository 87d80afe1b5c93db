"""Diagnostics de connectivité (Supabase, rate limiting)."""
from typing import Any, Dict
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.config import SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_KEY, PAYMENT_PROVIDER

logger = logging.getLogger(__name__)

def health_supabase_info() -> Dict[str, Any]:
    """
    Vérifie la configuration et tente une lecture minimale de 'products'.
    - Ne lève jamais: l'erreur est rapportée dans le dictionnaire.
    """
    info: Dict[str, Any] = {
        "url_set": bool(SUPABASE_URL),
        "anon_key_set": bool(SUPABASE_ANON_KEY),
        "service_key_set": bool(SUPABASE_SERVICE_KEY),
        "payment_provider": PAYMENT_PROVIDER,
        "connect_ok": False,
    }
    try:
        supabase_client.get_supabase().table("products").select("id").limit(1).execute()
        info["connect_ok"] = True
    except Exception as e:
        logger.exception("health.service.health_supabase_info failed")
        info["error"] = str(e)
    return info
