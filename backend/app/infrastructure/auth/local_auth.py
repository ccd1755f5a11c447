"""
Local JWT authentication provider.
"""

from __future__ import annotations

from jose import JWTError

from app.core.config import Settings
from app.core.security import decode_access_token
from app.interfaces.auth_provider import IAuthProvider, User
from app.models.enums import UserRole


class LocalAuthProvider(IAuthProvider):
    """Local auth provider with HMAC JWT validation."""

    def __init__(self, settings: Settings):
        if not settings.LOCAL_JWT_SECRET:
            raise ValueError("LOCAL_JWT_SECRET must be set for local auth")
        self._settings = settings

    async def verify_token(self, token: str) -> User:
        claims = decode_access_token(token, self._settings)
        subject = claims.get("sub")
        if not subject:
            raise JWTError("Missing subject")
        try:
            role = UserRole(claims.get("role") or UserRole.USER.value)
        except ValueError as exc:
            raise JWTError("Invalid role claim") from exc
        email = claims.get("email")
        return User(
            id=str(subject),
            email=str(email) if email else None,
            display_name=str(claims.get("name") or subject),
            role=role,
        )

    def is_enabled(self) -> bool:
        return True
