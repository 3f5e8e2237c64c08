"""Unit tests for bearer-token identity verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from draftgen.core.exceptions import AuthenticationError
from draftgen.interfaces.identity import Identity
from draftgen.strategies.identity.jwt_provider import JWTIdentityProvider

SECRET = "identity-secret-for-unit-tests-0123456789"


@pytest.fixture
def provider():
    return JWTIdentityProvider(SECRET)


class TestJWTIdentityProvider:
    """Test suite for JWTIdentityProvider."""

    def test_round_trip_claims(self, provider):
        token = provider.create_token(
            Identity(uid="user-1", email="a@example.in", phone_number="9876543210", name="Asha")
        )

        identity = provider.verify(token)

        assert identity == Identity(
            uid="user-1", email="a@example.in", phone_number="9876543210", name="Asha"
        )
        assert identity.display_name == "Asha"

    def test_display_name_falls_back_to_email(self):
        assert Identity(uid="u", email="a@example.in").display_name == "a@example.in"

    def test_missing_token(self, provider):
        with pytest.raises(AuthenticationError, match="Authentication required"):
            provider.verify("")

    def test_expired_token(self, provider):
        token = provider.create_token(Identity(uid="user-1"), ttl_minutes=-1)

        with pytest.raises(AuthenticationError, match="expired"):
            provider.verify(token)

    def test_wrong_secret(self, provider):
        token = JWTIdentityProvider("another-secret-entirely-0123456789").create_token(Identity(uid="user-1"))

        with pytest.raises(AuthenticationError, match="Invalid authentication token") as exc_info:
            provider.verify(token)

        assert exc_info.value.status_code == 401

    def test_subject_is_required(self, provider):
        now = datetime.now(timezone.utc)
        token = jwt.encode({"email": "a@example.in", "exp": now + timedelta(minutes=5)}, SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError):
            provider.verify(token)

    def test_garbage_token(self, provider):
        with pytest.raises(AuthenticationError):
            provider.verify("not.a.jwt")
