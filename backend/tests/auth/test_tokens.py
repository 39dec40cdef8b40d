"""
Token and hashing unit tests: JWT access tokens, Google ID tokens, Argon2/bcrypt.
"""

import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import bcrypt
import pytest
from jose import jwt

from zyrotech.auth.exceptions import InvalidGoogleTokenError, TokenExpiredError, TokenValidationError
from zyrotech.auth.google import verify_google_id_token
from zyrotech.auth.hashing import hash_secret, verify_secret
from zyrotech.auth.jwt import create_access_token, decode_access_token
from zyrotech.auth.utils import generate_reset_token, hash_token
from zyrotech.core.settings import settings


def _encode(claims: dict) -> str:
    return jwt.encode(claims, settings.auth.JWT_SECRET_KEY.get_secret_value(), algorithm="HS256")


def test_access_token_round_trip():
    user_id = uuid.uuid4()

    payload = decode_access_token(create_access_token(user_id))

    assert payload["sub"] == str(user_id)
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == settings.auth.JWT_EXPIRE_DAYS * 24 * 3600


def test_expired_token():
    past = datetime.now(timezone.utc) - timedelta(days=1)
    token = _encode({"sub": str(uuid.uuid4()), "iat": past, "exp": past, "type": "access"})

    with pytest.raises(TokenExpiredError):
        decode_access_token(token)


def test_token_with_wrong_type_or_subject():
    exp = datetime.now(timezone.utc) + timedelta(hours=1)

    with pytest.raises(TokenValidationError):
        decode_access_token(_encode({"sub": str(uuid.uuid4()), "exp": exp, "type": "refresh"}))
    with pytest.raises(TokenValidationError):
        decode_access_token(_encode({"sub": "not-a-uuid", "exp": exp, "type": "access"}))


def test_token_signed_with_other_secret():
    token = jwt.encode({"sub": str(uuid.uuid4()), "type": "access"}, "other-secret", algorithm="HS256")

    with pytest.raises(TokenValidationError) as exc_info:
        decode_access_token(token)
    assert exc_info.value.status_code == 401


def test_argon2_hash_verifies():
    hashed = hash_secret("1234")

    assert hashed.startswith("$argon2")
    assert verify_secret("1234", hashed) == (True, False)
    assert verify_secret("4321", hashed)[0] is False


def test_bcrypt_hash_verifies_and_needs_rehash():
    hashed = bcrypt.hashpw(b"secret-pass", bcrypt.gensalt(rounds=4)).decode()

    assert verify_secret("secret-pass", hashed) == (True, True)
    assert verify_secret("wrong-pass", hashed)[0] is False


def test_garbage_hash_is_rejected():
    assert verify_secret("anything", "not-a-hash")[0] is False


def test_reset_tokens_are_hashed():
    token = generate_reset_token()

    assert len(token) == 64
    assert hash_token(token) != token
    assert hash_token(token) == hash_token(token)


@pytest.mark.asyncio
async def test_google_token_with_foreign_audience():
    with patch("zyrotech.auth.google.id_token.verify_oauth2_token", return_value={"aud": "someone-else"}):
        with pytest.raises(InvalidGoogleTokenError):
            await verify_google_id_token("token")


@pytest.mark.asyncio
async def test_google_token_accepted_for_configured_client():
    claims = {"aud": "test-client-id", "sub": "123", "email": "user@gmail.com"}
    with patch("zyrotech.auth.google.id_token.verify_oauth2_token", return_value=claims):
        assert await verify_google_id_token("token") == claims


@pytest.mark.asyncio
async def test_google_library_errors_are_mapped():
    with patch("zyrotech.auth.google.id_token.verify_oauth2_token", side_effect=ValueError("bad signature")):
        with pytest.raises(InvalidGoogleTokenError):
            await verify_google_id_token("token")
