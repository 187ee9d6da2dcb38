"""
Request guards, run as FastAPI dependencies in a fixed order:

    load_user / load_bar  ->  get_principal  ->  require_owner

Path ids are resolved into documents and handed to the handler as parameters.
"""
import os
import logging
from typing import Dict, Any, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from barsocial.db.users import get_user
from barsocial.db.bars import get_bar
from barsocial.errors import AuthError, ErrorMessages

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

bearer_scheme = HTTPBearer(auto_error=False)


def load_user(userId: str) -> Dict[str, Any]:
    """Resolve the userId path parameter into a user document"""
    return get_user(userId)


def load_bar(barId: str) -> Dict[str, Any]:
    """Resolve the barId path parameter into a bar document"""
    return get_bar(barId)


def decode_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise AuthError(ErrorMessages.INVALID_TOKEN)


def get_principal(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> str:
    """Id of the authenticated user taken from the bearer token"""
    if credentials is None:
        raise AuthError(ErrorMessages.MISSING_TOKEN)
    claims = decode_token(credentials.credentials)
    principal = claims.get("id") or claims.get("sub")
    if not principal:
        raise AuthError(ErrorMessages.INVALID_TOKEN)
    return str(principal)


def require_owner(user: Dict[str, Any] = Depends(load_user),
                  principal: str = Depends(get_principal)) -> Dict[str, Any]:
    """The loaded user, provided the caller is that user"""
    if user["id"] != principal:
        logger.warning(f"User {principal} tried to modify user {user['id']}")
        raise AuthError(ErrorMessages.FORBIDDEN_USER, 403)
    return user
