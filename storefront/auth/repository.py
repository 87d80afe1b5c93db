from typing import Any, Dict, List
import logging

import storefront.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

ROLES_TABLE = "user_roles"

# --- Auth (supabase.auth.*) ---

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l'utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}

# --- Table user_roles ---

def fetch_roles(user_id: str) -> List[str]:
    """Rôles applicatifs de l'utilisateur ([] en cas d'erreur: pas d'escalade par défaut)."""
    if not user_id:
        return []
    try:
        res = (
            supabase_client.get_service_supabase()
            .table(ROLES_TABLE)
            .select("role")
            .eq("user_id", user_id)
            .execute()
        )
        return [str(r.get("role")) for r in (res.data or []) if r.get("role")]
    except Exception:
        logger.exception("auth.repository.fetch_roles failed user_id=%s", user_id)
        return []

def count_admins() -> int:
    """Nombre d'admins (count='exact' si disponible). Lève en cas d'erreur."""
    res = (
        supabase_client.get_service_supabase()
        .table(ROLES_TABLE)
        .select("*", count="exact")
        .eq("role", "admin")
        .execute()
    )
    count = getattr(res, "count", None)
    if isinstance(count, int):
        return count
    return len(res.data or [])

def insert_role(user_id: str, role: str) -> None:
    supabase_client.get_service_supabase().table(ROLES_TABLE).insert({"user_id": user_id, "role": role}).execute()
