"""
Mock authentication provider for local development.
"""

from app.interfaces.auth_provider import IAuthProvider, User
from app.models.enums import UserRole

ADMIN_TOKEN_PREFIX = "admin:"


class MockAuthProvider(IAuthProvider):
    """Mock auth provider where the bearer token is the user ID."""

    def __init__(self, enabled: bool = False):
        """
        Initialize mock auth provider.

        Args:
            enabled: Whether authentication is required
        """
        self._enabled = enabled
        self._mock_users = {
            "dev_user": User(
                id="dev_user",
                email="dev@example.com",
                display_name="Developer",
            ),
            "dev_admin": User(
                id="dev_admin",
                email="admin@example.com",
                display_name="Administrator",
                role=UserRole.ADMIN,
            ),
        }

    async def verify_token(self, token: str) -> User:
        """
        Verify token - in mock mode, token is treated as user_id.

        ``admin:<user_id>`` yields the same user with the admin role.

        Args:
            token: User ID (in mock mode)

        Returns:
            Mock user
        """
        role = UserRole.USER
        if token.startswith(ADMIN_TOKEN_PREFIX):
            token = token[len(ADMIN_TOKEN_PREFIX):]
            role = UserRole.ADMIN
        if not token:
            raise ValueError("Empty user id")
        if token in self._mock_users:
            user = self._mock_users[token]
            return user if role == UserRole.USER else user.model_copy(update={"role": role})
        # Default user for any token
        if "@" in token:
            return User(id=token, email=token, display_name=token, role=role)
        return User(id=token, email=f"{token}@example.com", display_name=token, role=role)

    def is_enabled(self) -> bool:
        """Check if authentication is enabled."""
        return self._enabled
