# quizmaker/auth.py
from typing import Optional, Any
from fastapi import Header
from jose import jwt, JWTError
from loguru import logger
from .errors import Unauthorized
from .settings import settings

def _get_supabase_secret() -> str:
    """
    Return the Supabase JWT secret as a plain string, even if Settings uses SecretStr.
    """
    secret: Any = getattr(settings, "SUPABASE_JWT_SECRET", "")
    if hasattr(secret, "get_secret_value"):
        # pydantic SecretStr
        secret = secret.get_secret_value()
    if not isinstance(secret, str):
        secret = str(secret or "")
    return secret.strip()

def user_id_from_auth_header(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.lower().startswith("bearer "):
        logger.warning("[auth] no Authorization Bearer token present")
        return None

    token = authorization.split(" ", 1)[1].strip()
    secret = _get_supabase_secret()
    if not secret:
        logger.error("[auth] SUPABASE_JWT_SECRET is not configured; rejecting token")
        return None

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=["HS256"],
            options={"verify_aud": False},  # Supabase uses 'aud': 'authenticated'
        )
        uid = payload.get("sub") or payload.get("user_id")
        if not uid:
            logger.warning(f"[auth] decoded JWT but no sub/user_id; payload keys: {list(payload.keys())}")
        return uid
    except JWTError as e:
        logger.warning(f"[auth] JWT decode failed: {e}")
        return None

def require_user(authorization: Optional[str] = Header(default=None)) -> str:
    """FastAPI dependency: the caller's user id, or a 401 before the route body runs."""
    uid = user_id_from_auth_header(authorization)
    if not uid:
        raise Unauthorized()
    return uid
