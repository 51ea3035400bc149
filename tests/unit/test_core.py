"""Unit tests for tokens, password hashing and slugs."""
import jwt
import pytest
from bson import ObjectId

from app.config.env import require_env
from app.config.settings import settings
from core.auth.jwt import ALGORITHM, create_access_token, decode_token
from core.errors import UnauthorizedError
from core.utils.hash import hash_password, verify_password
from core.utils.validation import slugify


class TestTokens:
    def test_round_trip_claims(self) -> None:
        user_id = str(ObjectId())
        payload = decode_token(create_access_token(user_id, "admin"))
        assert payload["sub"] == user_id
        assert payload["role"] == "admin"
        assert payload["exp"] > payload["iat"]

    def test_wrong_secret(self) -> None:
        token = jwt.encode({"sub": "x"}, "another-secret-that-is-also-long-enough", algorithm=ALGORITHM)
        with pytest.raises(UnauthorizedError):
            decode_token(token)

    def test_expired(self) -> None:
        token = jwt.encode({"sub": "x", "exp": 1}, settings.SECRET_KEY, algorithm=ALGORITHM)
        with pytest.raises(UnauthorizedError) as exc:
            decode_token(token)
        assert exc.value.detail == "Token has expired"


class TestPasswords:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("s3cret!")
        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_unreadable_hash_is_a_mismatch(self) -> None:
        assert not verify_password("s3cret!", "not-a-hash")
        assert not verify_password("s3cret!", "")


@pytest.mark.parametrize("value, expected", [
    ("Arabica Coffee", "arabica-coffee"),
    ("  Black   Pepper!! ", "black-pepper"),
    ("Rice -- Basmati", "rice-basmati"),
    ("Café & Tea", "caf-tea"),
])
def test_slugify(value, expected) -> None:
    assert slugify(value) == expected


class TestRequiredEnvironment:
    def test_returns_values(self, monkeypatch) -> None:
        monkeypatch.setenv("B2B_TEST_A", "one")
        monkeypatch.setenv("B2B_TEST_B", "two")
        assert require_env("B2B_TEST_A", "B2B_TEST_B") == {"B2B_TEST_A": "one", "B2B_TEST_B": "two"}

    def test_lists_every_missing_name(self, monkeypatch) -> None:
        monkeypatch.delenv("B2B_TEST_A", raising=False)
        monkeypatch.setenv("B2B_TEST_B", "  ")
        with pytest.raises(RuntimeError) as exc:
            require_env("B2B_TEST_A", "B2B_TEST_B")
        assert "B2B_TEST_A, B2B_TEST_B" in str(exc.value)
