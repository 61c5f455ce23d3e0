import logging
from typing import Any, Dict, Optional

from fastapi import Depends, Request

from auth import TokenExpired, TokenInvalid, decode_access_token
from errors import Forbidden, Unauthorized
from utils.lead_workflow import LeadWorkflow
from utils.user_workflow import UserWorkflow, find_user_by_id

logger = logging.getLogger("leopay.auth")

NOT_AUTHORIZED = "Not authorized to access this route"
TOKEN_COOKIE = "token"


# --- FONCTIONS UTILITAIRES ---

def get_token(request: Request) -> Optional[str]:
    """Jeton Bearer de l'en-tête Authorization, sinon cookie `token`."""
    authorization = request.headers.get("Authorization") or ""
    if authorization.startswith("Bearer"):
        parts = authorization.split(" ", 1)
        token = parts[1].strip() if len(parts) == 2 else ""
        if token:
            return token
    return request.cookies.get(TOKEN_COOKIE) or None


def get_user_workflow(request: Request) -> UserWorkflow:
    return request.app.state.user_workflow


def get_lead_workflow(request: Request) -> LeadWorkflow:
    return request.app.state.lead_workflow


# --- DÉPENDANCES FASTAPI ---

def get_current_user(request: Request) -> Dict[str, Any]:
    """Décode le jeton JWT et récupère l'utilisateur depuis MongoDB."""
    path = request.url.path
    token = get_token(request)
    if not token:
        logger.warning("Aucun jeton fourni pour %s", path)
        raise Unauthorized(NOT_AUTHORIZED)

    try:
        user_id = decode_access_token(token, request.app.state.settings)
    except TokenExpired:
        logger.warning("Jeton expiré pour %s", path)
        raise Unauthorized(NOT_AUTHORIZED)
    except TokenInvalid as e:
        logger.warning("Jeton invalide pour %s: %s", path, e)
        raise Unauthorized(NOT_AUTHORIZED)

    user = find_user_by_id(request.app.state.db, user_id)
    if user is None:
        logger.warning("L'utilisateur %s du jeton n'existe plus (%s)", user_id, path)
        raise Unauthorized(NOT_AUTHORIZED)

    user.pop("password", None)
    request.state.user = user
    return user


def authorize(*roles: str):
    """Vérifie que l'utilisateur actuel a l'un des rôles autorisés."""
    allowed_roles = set(roles)

    def role_checker(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        role = current_user.get("role")
        if role not in allowed_roles:
            logger.warning("Rôle %s refusé (autorisés: %s)", role, ", ".join(sorted(allowed_roles)))
            raise Forbidden(f"User role {role} is not authorized to access this route")
        return current_user

    return role_checker


get_current_admin_user = authorize("admin")
