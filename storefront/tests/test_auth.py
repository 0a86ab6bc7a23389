import asyncio
from datetime import datetime, timedelta, timezone

from fastapi.security import HTTPAuthorizationCredentials
from jose import jwt

from storefront.core.auth import (
    create_access_token,
    get_current_user_optional,
    verify_token,
)
from storefront.core.config import settings


def _encode(**claims) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": "7",
        "type": "access",
        "iat": now,
        "exp": now + timedelta(minutes=5),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    payload.update(claims)
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


class TestTokens:
    def test_round_trip(self):
        token = create_access_token(
            {"sub": 7, "username": "manager", "email": "m@example.com", "roles": ["shop_manager"]}
        )

        token_data = verify_token(token)

        assert token_data.user_id == 7
        assert token_data.username == "manager"
        assert token_data.email == "m@example.com"
        assert token_data.roles == ["shop_manager"]
        assert token_data.token_id

    def test_expired_token(self):
        token = create_access_token({"sub": 7}, expires_delta=timedelta(minutes=-10))

        assert verify_token(token) is None

    def test_wrong_audience(self):
        assert verify_token(_encode(aud="someone-else")) is None

    def test_wrong_issuer(self):
        assert verify_token(_encode(iss="someone-else")) is None

    def test_wrong_token_type(self):
        assert verify_token(_encode(type="refresh")) is None

    def test_non_integer_subject(self):
        assert verify_token(_encode(sub="admin")) is None

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": "1", "type": "access"}, "another-secret", algorithm=settings.jwt_algorithm
        )

        assert verify_token(token) is None


class TestCurrentUser:
    def test_no_credentials(self):
        assert asyncio.run(get_current_user_optional(None)) is None

    def test_invalid_credentials(self):
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="junk")

        assert asyncio.run(get_current_user_optional(credentials)) is None

    def test_user_from_token(self):
        token = create_access_token({"sub": 3, "roles": ["admin"]})
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        user = asyncio.run(get_current_user_optional(credentials))

        assert user.id == 3
        assert user.username == "user-3"
        assert user.has_role("admin")
        assert not user.has_role("shop_manager")
