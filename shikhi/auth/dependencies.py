# shikhi/auth/dependencies.py
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from shikhi import config
from shikhi.utils.exceptions import AuthenticationError, forbidden, unauthorized
from shikhi.utils.logger import get_logger

logger = get_logger("Auth")

bearer_scheme = HTTPBearer(auto_error=False)


def _role_from_claims(claims: dict) -> str:
    for key in ("metadata", "public_metadata", "publicMetadata"):
        meta = claims.get(key)
        if isinstance(meta, dict) and meta.get("role"):
            return meta["role"]
    return claims.get("role") or "student"


def decode_session_token(token: str) -> dict:
    """Verify a provider-issued session JWT and return its claims."""
    if not config.AUTH_JWT_KEY:
        logger.error("AUTH_JWT_KEY is not configured")
        raise AuthenticationError("Authentication is not configured")

    options = {"require": ["sub", "exp"]}
    try:
        return jwt.decode(
            token,
            config.AUTH_JWT_KEY,
            algorithms=config.AUTH_JWT_ALGORITHMS,
            issuer=config.AUTH_JWT_ISSUER,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token rejected: {e}")
        raise AuthenticationError("Invalid session token")


def claims_to_user(claims: dict) -> dict:
    return {
        "user_id": claims["sub"],
        "role": _role_from_claims(claims),
        "email": claims.get("email"),
        "first_name": claims.get("first_name") or claims.get("given_name"),
        "last_name": claims.get("last_name") or claims.get("family_name"),
        "username": claims.get("username"),
        "image_url": claims.get("image_url") or claims.get("picture"),
    }


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None or not credentials.credentials:
        unauthorized("Unauthorized")

    current_user = claims_to_user(decode_session_token(credentials.credentials))
    request.state.user_id = current_user["user_id"]
    return current_user


def require_role(*roles: str):
    async def checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user.get("role") not in roles:
            forbidden(f"Requires role: {', '.join(roles)}")
        return current_user

    return checker
