"""
Authentication Service

Registers accounts and validates login credentials against the stored
bcrypt hashes. Registration reports its outcome as a RegistrationResult
rather than raising, so the HTTP layer can answer 400 with the message.
A failed login is an expected outcome and simply yields None.

Usage:
    service = AuthService(db, PasswordHasher(rounds=12))
    result = await service.register("jane", "jane@example.com", "secret", "Customer")
    if result.success:
        print(result.user.id)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateEmail, InvalidRole
from app.core.security import PasswordHasher
from app.models import User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    """
    Outcome of a registration attempt.

    Attributes:
        success: Whether the user was created
        message: Human-readable outcome
        user: The created user on success
        error_code: duplicate_email, invalid_role or registration_failed
    """
    success: bool
    message: str
    user: Optional[User] = None
    error_code: Optional[str] = None

    @classmethod
    def failure(cls, message: str, error_code: str) -> "RegistrationResult":
        return cls(success=False, message=message, error_code=error_code)


class AuthService:
    """Account registration and credential validation."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        role: str,
    ) -> RegistrationResult:
        """
        Create a new account.

        Args:
            username: Display name
            email: Login email, unique across accounts
            password: Plaintext password, only its bcrypt hash is stored
            role: Customer, RestaurantOwner or Admin

        Returns:
            RegistrationResult with the created user, or the failure reason
        """
        try:
            if await self.get_user_by_email(email) is not None:
                return RegistrationResult.failure(DuplicateEmail.default_message, "duplicate_email")

            if role not in UserRole.values():
                return RegistrationResult.failure(InvalidRole.default_message, "invalid_role")

            user = User(
                username=username,
                email=email,
                password_hash=self.hasher.hash(password),
                role=role,
            )
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)

        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            await self.db.rollback()
            return RegistrationResult.failure(DuplicateEmail.default_message, "duplicate_email")
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("Error during registration")
            return RegistrationResult.failure(
                "An error occurred during registration", "registration_failed"
            )

        logger.info(f"Registered user #{user.id} ({user.role})")
        return RegistrationResult(success=True, message="Registration successful", user=user)

    async def validate_credentials(self, email: str, password: str) -> Optional[User]:
        """Return the user if the email exists and the password verifies, else None."""
        user = await self.get_user_by_email(email)
        if user is None:
            return None
        if not self.hasher.verify(password, user.password_hash):
            return None
        return user
