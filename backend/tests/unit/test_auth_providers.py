"""
Unit tests for the mock and local JWT auth providers.
"""

import pytest
from jose import JWTError

from app.core.config import Settings
from app.core.security import create_access_token
from app.infrastructure.auth.local_auth import LocalAuthProvider
from app.infrastructure.local.mock_auth import MockAuthProvider
from app.models.enums import UserRole


@pytest.fixture
def jwt_settings():
    return Settings(
        AUTH_PROVIDER="local",
        LOCAL_JWT_SECRET="unit-test-secret",
        LOCAL_JWT_ISSUER="projectdesk-test",
    )


class TestMockAuthProvider:
    @pytest.mark.asyncio
    async def test_token_is_user_id(self):
        user = await MockAuthProvider(enabled=True).verify_token("alice")
        assert user.id == "alice"
        assert user.role == UserRole.USER

    @pytest.mark.asyncio
    async def test_admin_prefix_grants_admin(self):
        user = await MockAuthProvider(enabled=True).verify_token("admin:alice")
        assert user.id == "alice"
        assert user.is_admin

    @pytest.mark.asyncio
    async def test_known_admin_user(self):
        user = await MockAuthProvider(enabled=True).verify_token("dev_admin")
        assert user.is_admin

    @pytest.mark.asyncio
    async def test_empty_admin_token_rejected(self):
        with pytest.raises(ValueError):
            await MockAuthProvider(enabled=True).verify_token("admin:")


class TestLocalAuthProvider:
    def test_requires_secret(self):
        with pytest.raises(ValueError):
            LocalAuthProvider(Settings(LOCAL_JWT_SECRET=""))

    @pytest.mark.asyncio
    async def test_round_trip_with_role(self, jwt_settings):
        token = create_access_token("bob", jwt_settings, role=UserRole.ADMIN)

        user = await LocalAuthProvider(jwt_settings).verify_token(token)

        assert user.id == "bob"
        assert user.role == UserRole.ADMIN

    @pytest.mark.asyncio
    async def test_wrong_secret_rejected(self, jwt_settings):
        other = jwt_settings.model_copy(update={"LOCAL_JWT_SECRET": "another-secret"})
        token = create_access_token("bob", other)

        with pytest.raises(JWTError):
            await LocalAuthProvider(jwt_settings).verify_token(token)

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self, jwt_settings):
        token = create_access_token("bob", jwt_settings, expires_minutes=-5)

        with pytest.raises(JWTError):
            await LocalAuthProvider(jwt_settings).verify_token(token)
