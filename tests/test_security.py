from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.core.config import Settings
from app.core.exceptions import AuthenticationError, ConfigurationError
from app.core.security import PasswordHasher, TokenIssuer

SECRET = "unit-test-secret-key-with-enough-length"


@dataclass
class FakeUser:
    id: int = 7
    email: str = "jane@example.com"
    username: str = "jane"
    role: str = "Customer"


@pytest.fixture
def issuer():
    return TokenIssuer(SECRET, issuer="FoodDeliveryAPI", audience="FoodDeliveryClient")


class TestPasswordHasher:
    def test_hash_is_salted_and_verifies(self):
        hasher = PasswordHasher(rounds=4)
        first = hasher.hash("correct horse")
        second = hasher.hash("correct horse")

        assert first != second
        assert "correct horse" not in first
        assert hasher.verify("correct horse", first)
        assert hasher.verify("correct horse", second)

    def test_wrong_password_does_not_verify(self):
        hasher = PasswordHasher(rounds=4)
        assert not hasher.verify("wrong", hasher.hash("right"))

    def test_garbage_hash_does_not_verify(self):
        assert not PasswordHasher(rounds=4).verify("anything", "not-a-bcrypt-hash")


class TestTokenIssuer:
    @pytest.mark.parametrize("secret", [None, ""])
    def test_missing_secret_is_fatal(self, secret):
        with pytest.raises(ConfigurationError):
            TokenIssuer(secret)

    def test_from_settings_requires_secret(self):
        with pytest.raises(ConfigurationError):
            TokenIssuer.from_settings(Settings(jwt_secret=None, _env_file=None))

    def test_token_carries_identity_claims(self, issuer):
        token = issuer.issue_token(FakeUser())
        payload = jwt.decode(
            token, SECRET, algorithms=["HS256"], audience="FoodDeliveryClient"
        )

        assert payload["sub"] == "7"
        assert payload["email"] == "jane@example.com"
        assert payload["name"] == "jane"
        assert payload["role"] == "Customer"
        assert payload["iss"] == "FoodDeliveryAPI"
        assert payload["aud"] == "FoodDeliveryClient"
        assert payload["jti"]

    def test_default_expiry_is_seven_days(self, issuer):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        token = issuer.issue_token(FakeUser(), now=now)
        payload = jwt.decode(
            token,
            SECRET,
            algorithms=["HS256"],
            audience="FoodDeliveryClient",
            options={"verify_exp": False},
        )
        assert payload["exp"] - payload["iat"] == int(timedelta(days=7).total_seconds())

    def test_token_ids_are_unique(self, issuer):
        first = issuer.decode_token(issuer.issue_token(FakeUser()))
        second = issuer.decode_token(issuer.issue_token(FakeUser()))
        assert first.token_id != second.token_id

    def test_decode_round_trip(self, issuer):
        claims = issuer.decode_token(issuer.issue_token(FakeUser(role="Admin")))
        assert claims.user_id == 7
        assert claims.username == "jane"
        assert claims.role == "Admin"

    def test_rejects_expired_token(self, issuer):
        long_ago = datetime.now(timezone.utc) - timedelta(days=30)
        token = issuer.issue_token(FakeUser(), now=long_ago)
        with pytest.raises(AuthenticationError, match="expired"):
            issuer.decode_token(token)

    def test_rejects_wrong_signature(self, issuer):
        forged = TokenIssuer("another-secret-key-with-enough-length").issue_token(FakeUser())
        with pytest.raises(AuthenticationError):
            issuer.decode_token(forged)

    def test_rejects_wrong_audience(self, issuer):
        token = TokenIssuer(SECRET, audience="SomeoneElse").issue_token(FakeUser())
        with pytest.raises(AuthenticationError):
            issuer.decode_token(token)

    def test_rejects_wrong_issuer(self, issuer):
        token = TokenIssuer(SECRET, issuer="Impostor").issue_token(FakeUser())
        with pytest.raises(AuthenticationError):
            issuer.decode_token(token)

    def test_rejects_token_without_role(self, issuer):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": "7",
                "email": "jane@example.com",
                "name": "jane",
                "jti": "abc",
                "iss": "FoodDeliveryAPI",
                "aud": "FoodDeliveryClient",
                "exp": now + timedelta(days=1),
            },
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(AuthenticationError):
            issuer.decode_token(token)

    def test_rejects_garbage(self, issuer):
        with pytest.raises(AuthenticationError):
            issuer.decode_token("not.a.jwt")
