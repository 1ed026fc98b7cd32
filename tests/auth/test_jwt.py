"""Tests for JWT token management."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from country_explorer.auth.jwt import create_access_token, create_refresh_token, verify_token
from country_explorer.errors import ExpiredToken, InvalidToken, Unauthenticated, WrongTokenKind
from tests.conftest import make_settings


@pytest.fixture
def jwt_settings(tmp_path):
    return make_settings(tmp_path)


class TestAccessToken:
    def test_create_and_verify(self, jwt_settings):
        token = create_access_token("user-1", jwt_settings)
        payload = verify_token(token, jwt_settings, expected_type="access")
        assert payload["sub"] == "user-1"
        assert payload["type"] == "access"
        assert payload["iss"] == "country-explorer"
        assert payload["exp"] - payload["iat"] == 15 * 60

    def test_tokens_are_unique(self, jwt_settings):
        first = verify_token(create_access_token("user-1", jwt_settings), jwt_settings)
        second = verify_token(create_access_token("user-1", jwt_settings), jwt_settings)
        assert first["jti"] != second["jti"]

    def test_refresh_token_rejected_as_access(self, jwt_settings):
        token = create_refresh_token("user-1", jwt_settings)
        with pytest.raises(WrongTokenKind, match="Expected token type"):
            verify_token(token, jwt_settings, expected_type="access")


class TestRefreshToken:
    def test_create_and_verify(self, jwt_settings):
        token = create_refresh_token("user-1", jwt_settings)
        payload = verify_token(token, jwt_settings, expected_type="refresh")
        assert payload["type"] == "refresh"
        assert payload["exp"] - payload["iat"] == 7 * 24 * 3600

    def test_access_token_rejected_as_refresh(self, jwt_settings):
        token = create_access_token("user-1", jwt_settings)
        with pytest.raises(WrongTokenKind):
            verify_token(token, jwt_settings, expected_type="refresh")


class TestRejection:
    def test_expired(self, tmp_path):
        settings = make_settings(tmp_path, jwt_access_token_expire_minutes=-1)
        token = create_access_token("user-1", settings)
        with pytest.raises(ExpiredToken):
            verify_token(token, settings)

    def test_tampered_payload(self, jwt_settings):
        header, _payload, signature = create_access_token("user-1", jwt_settings).split(".")
        forged = jwt.encode(
            {"sub": "admin", "type": "access", "iss": "country-explorer", "exp": datetime.now(timezone.utc)},
            "x" * 32,
            algorithm="HS256",
        ).split(".")[1]
        with pytest.raises(InvalidToken):
            verify_token(f"{header}.{forged}.{signature}", jwt_settings)

    def test_wrong_secret(self, tmp_path, jwt_settings):
        other = make_settings(tmp_path, jwt_secret_key="another-secret-key-that-is-long-enough")
        token = create_access_token("user-1", other)
        with pytest.raises(InvalidToken):
            verify_token(token, jwt_settings)

    def test_wrong_issuer(self, tmp_path, jwt_settings):
        other = make_settings(tmp_path, jwt_issuer="someone-else")
        token = create_access_token("user-1", other)
        with pytest.raises(InvalidToken):
            verify_token(token, jwt_settings)

    def test_missing_subject(self, jwt_settings):
        token = jwt.encode(
            {
                "type": "access",
                "iss": "country-explorer",
                "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
            },
            jwt_settings.jwt_secret_key,
            algorithm="HS256",
        )
        with pytest.raises(InvalidToken):
            verify_token(token, jwt_settings)

    @pytest.mark.parametrize("token", ["", "not.a.jwt", "garbage"])
    def test_malformed(self, jwt_settings, token):
        with pytest.raises(InvalidToken):
            verify_token(token, jwt_settings)

    def test_all_rejections_are_unauthenticated(self):
        for error in (ExpiredToken, InvalidToken, WrongTokenKind):
            assert issubclass(error, Unauthenticated)
            assert error.status_code == 401
