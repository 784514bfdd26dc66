"""
Password Hashing and Session Tokens

PasswordHasher wraps bcrypt; TokenIssuer mints and verifies HS256 JWTs.
Both are built from explicit values (normally taken from Settings) and
never read the environment themselves.

Usage:
    from app.core.security import TokenIssuer

    issuer = TokenIssuer.from_settings(get_settings())
    token = issuer.issue_token(user)
    claims = issuer.decode_token(token)
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bcrypt
import jwt

from app.core.config import Settings
from app.core.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "email", "name", "role", "jti", "iss", "aud", "exp"]


class PasswordHasher:
    """Salted one-way password hashing with a configurable bcrypt cost."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Stored value is not a bcrypt hash, or the password is over 72 bytes
            return False


@dataclass
class TokenClaims:
    """
    Identity carried inside a verified session token.

    Attributes:
        user_id: Subject id (users.id)
        email: User email at issue time
        username: User display name at issue time
        role: Customer, RestaurantOwner or Admin
        token_id: Unique token id (jti)
        expires_at: Expiry timestamp (UTC)
    """
    user_id: int
    email: str
    username: str
    role: str
    token_id: str
    expires_at: datetime


class TokenIssuer:
    """
    Issues and verifies signed, time-bounded session tokens.

    Raises:
        ConfigurationError: On construction when the signing secret is
            absent or empty. Tokens are never issued unsigned.
    """

    def __init__(
        self,
        secret: Optional[str],
        issuer: str = "FoodDeliveryAPI",
        audience: str = "FoodDeliveryClient",
        expire_days: int = 7,
    ):
        if not secret:
            raise ConfigurationError("JWT secret is not configured (set JWT_SECRET)")
        self._secret = secret
        self.issuer = issuer
        self.audience = audience
        self.expire_days = expire_days

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret=settings.jwt_secret,
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            expire_days=settings.jwt_expire_days,
        )

    def issue_token(self, user: Any, now: Optional[datetime] = None) -> str:
        """
        Mint a token for a user.

        Args:
            user: Object exposing id, email, username and role
            now: Issue time override (UTC); defaults to the current time

        Returns:
            Encoded JWT string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.username,
            "role": user.role,
            "jti": str(uuid.uuid4()),
            "iss": self.issuer,
            "aud": self.audience,
            "iat": issued_at,
            "exp": issued_at + timedelta(days=self.expire_days),
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALGORITHM)

    def decode_token(self, token: str) -> TokenClaims:
        """
        Verify a token and return its claims.

        Raises:
            AuthenticationError: Bad signature, wrong issuer or audience,
                expired, malformed, or missing a required claim
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise AuthenticationError("Invalid token")

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token")

        return TokenClaims(
            user_id=user_id,
            email=payload["email"],
            username=payload["name"],
            role=payload["role"],
            token_id=payload["jti"],
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
