from typing import Any, Dict, Iterable
import logging

from fastapi import HTTPException

from .repository import (
    get_user_from_access_token as _repo_get_user_from_token,
    fetch_roles as _repo_fetch_roles,
    count_admins as _repo_count_admins,
    insert_role as _repo_insert_role,
)

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

def determine_role(roles: Iterable[str] | None) -> str:
    if ADMIN_ROLE in {str(r).lower() for r in (roles or [])}:
        return ADMIN_ROLE
    return "user"

# --- Intégration sécurité ---

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise l'utilisateur issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, role, token}
    - Le rôle vient de la table user_roles (seul 'admin' est reconnu)
    """
    raw = _repo_get_user_from_token(access_token)
    uid = raw.get("id")
    role = determine_role(_repo_fetch_roles(uid)) if uid else "user"
    return {"id": uid, "email": raw.get("email"), "role": role, "token": access_token}

def setup_first_admin(user: Dict[str, Any]) -> Dict[str, Any]:
    """Amorçage: l'utilisateur courant devient admin seulement si aucun admin n'existe.
    - 403 si un admin existe déjà
    - 500 si la vérification ou l'insertion échoue
    """
    try:
        existing = _repo_count_admins()
    except Exception:
        logger.exception("auth.service.setup_first_admin count failed")
        raise HTTPException(status_code=500, detail="Failed to check admin status")
    if existing > 0:
        raise HTTPException(status_code=403, detail="An admin already exists")
    try:
        _repo_insert_role(user.get("id"), ADMIN_ROLE)
    except Exception:
        logger.exception("auth.service.setup_first_admin insert failed user_id=%s", user.get("id"))
        raise HTTPException(status_code=500, detail="Failed to grant admin role")
    logger.info("auth.service.setup_first_admin granted user_id=%s", user.get("id"))
    return {"success": True}
