"""Tests for access token handling and the authentication dependency."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from fastapi import status
from jose import JWTError, jwt

from learntrack.auth.permissions import UserRole
from learntrack.auth.security import decode_access_token
from tests.fakes import create_access_token, encode_claims


def _claims(**overrides) -> dict:
    claims = {
        "sub": str(uuid4()),
        "type": "access",
        "exp": datetime.now(UTC) + timedelta(minutes=5),
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


class TestAccessToken:
    """Tests for access token creation and decoding."""

    def test_round_trip_claims(self) -> None:
        """Decoded payload keeps the subject and role."""
        user_id = uuid4()
        token = create_access_token(user_id, UserRole.TEACHER)

        payload = decode_access_token(token)

        assert payload["sub"] == str(user_id)
        assert payload["role"] == "teacher"
        assert payload["type"] == "access"

    def test_expired_token(self) -> None:
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-1))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_token_type(self) -> None:
        """Refresh tokens are not accepted as access tokens."""
        token = encode_claims(_claims(type="refresh"))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_missing_subject(self) -> None:
        token = encode_claims(_claims(sub=None, role="admin"))

        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_wrong_signature(self) -> None:
        token = jwt.encode(_claims(), "not-the-secret", algorithm="HS256")

        with pytest.raises(JWTError):
            decode_access_token(token)


class TestAuthenticationDependency:
    """Tests for bearer token handling on protected routes."""

    def test_missing_token(self, client) -> None:
        response = client.get(f"/v1/progress/lessons/{uuid4()}")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "unauthenticated"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_malformed_header(self, client) -> None:
        response = client.get(
            f"/v1/progress/lessons/{uuid4()}",
            headers={"Authorization": "Token abc"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_non_uuid_subject(self, client) -> None:
        """A token whose subject is not a user id is rejected."""
        token = encode_claims(_claims(sub="someone"))

        response = client.get(
            f"/v1/progress/lessons/{uuid4()}",
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_valid_token(self, client, student_headers) -> None:
        response = client.get(f"/v1/progress/lessons/{uuid4()}", headers=student_headers)

        assert response.status_code == status.HTTP_200_OK
