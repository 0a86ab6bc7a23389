"""
JWT authentication for the storefront API.

Resolves the caller identity from a bearer token. Authorization decisions
are made by the permission gate in ``core.permissions``; this module only
answers "who is calling".
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel
import secrets
import logging

from .config import settings

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


class TokenData(BaseModel):
    """Token payload data."""

    user_id: Optional[int] = None
    username: Optional[str] = None
    email: Optional[str] = None
    roles: List[str] = []
    token_id: Optional[str] = None


class User(BaseModel):
    """Authenticated caller."""

    id: int
    username: str
    email: Optional[str] = None
    roles: List[str] = []
    is_active: bool = True

    def has_role(self, role: str) -> bool:
        return role in self.roles


def generate_token_id() -> str:
    """Generate a unique token ID for tracking."""
    return secrets.token_urlsafe(32)


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a JWT access token using the configured secret and claims."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    if "sub" in to_encode:
        to_encode["sub"] = str(to_encode["sub"])

    to_encode.update(
        {
            "exp": expire,
            "type": "access",
            "jti": generate_token_id(),
            "iat": now,
            "iss": settings.jwt_issuer,
            "aud": settings.jwt_audience,
        }
    )

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def verify_token(token: str, token_type: str = "access") -> Optional[TokenData]:
    """
    Verify and decode a JWT token.

    Args:
        token: JWT token to verify
        token_type: Expected token type

    Returns:
        TokenData if valid, None otherwise
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            issuer=settings.jwt_issuer,
            options={"require_exp": True, "require_iat": True, "leeway": settings.jwt_leeway_seconds},
        )
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None

    if payload.get("type") != token_type:
        logger.warning(f"Token type mismatch: expected {token_type}, got {payload.get('type')}")
        return None

    # sub is a string per the JWT standard but user ids are integers internally
    try:
        user_id = int(payload.get("sub"))
    except (ValueError, TypeError):
        return None

    return TokenData(
        user_id=user_id,
        username=payload.get("username"),
        email=payload.get("email"),
        roles=payload.get("roles", []),
        token_id=payload.get("jti"),
    )


def user_from_token(token_data: TokenData) -> User:
    username = token_data.username or f"user-{token_data.user_id}"
    return User(
        id=token_data.user_id,
        username=username,
        email=token_data.email,
        roles=list(token_data.roles or []),
    )


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[User]:
    """Get current user if authenticated, None otherwise."""
    if not credentials:
        return None

    token_data = verify_token(credentials.credentials)
    if token_data is None:
        return None

    return user_from_token(token_data)
