"""
Authentication Service

Login, identity resolution for the request gate, and password changes for
the single librarian role.

Security Features:
=================
1. Passwords are verified through bcrypt, never compared as text
2. Tokens carry only the user id; the email is re-read on every request
3. Failure reasons are logged, while callers only see a generic message
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from catalog.exceptions import InvalidTokenError, NotFoundError, UnauthorizedError
from catalog.models import User
from catalog.services.security import TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller attached to a request: {id, email} only."""

    id: int
    email: str


class AuthService:
    """
    Authentication operations over the users table.

    Args:
        db: Database session for the current request
        tokens: Process-wide token service
    """

    def __init__(self, db: Session, tokens: TokenService) -> None:
        self.db = db
        self.tokens = tokens

    def _get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == email)
        return self.db.execute(stmt).scalar_one_or_none()

    def login(self, email: str, password: str) -> str:
        """
        Check credentials and issue a bearer token.

        Every attempt is independent: there is no lockout.

        Raises:
            NotFoundError: no user with this email
            UnauthorizedError: password does not match
        """
        user = self._get_user_by_email(email)
        if user is None:
            logger.warning(f"Login failed: user not found for {email}")
            raise NotFoundError("User not registered")

        if not verify_password(password, user.password):
            logger.warning(f"Login failed: incorrect password for {email}")
            raise UnauthorizedError("Incorrect password")

        logger.info(f"User logged in: {user.email}")
        return self.tokens.issue(user.id)

    def resolve_identity(self, token: str) -> Identity:
        """
        Turn a bearer token into the caller's identity.

        Raises:
            UnauthorizedError: token invalid/expired or user no longer exists
        """
        try:
            user_id = self.tokens.verify(token)
        except InvalidTokenError as e:
            logger.warning(f"Rejected bearer token: {e}")
            raise UnauthorizedError() from None

        stmt = select(User.id, User.email).where(User.id == user_id)
        row = self.db.execute(stmt).one_or_none()
        if row is None:
            logger.warning(f"Bearer token for unknown user id {user_id}")
            raise UnauthorizedError()

        return Identity(id=row.id, email=row.email)

    @staticmethod
    def get_current_user(identity: Identity) -> dict:
        """Project the resolved identity; no further checks."""
        return {"id": identity.id, "email": identity.email}

    def change_password(self, email: str, new_password: str) -> None:
        """
        Overwrite the password of the account identified by email.

        The current password is NOT verified: any authenticated caller can
        reset any account.

        Raises:
            NotFoundError: no user with this email
        """
        user = self._get_user_by_email(email)
        if user is None:
            raise NotFoundError("User not registered")

        user.password = hash_password(new_password)
        self.db.commit()

        logger.info(f"Password changed for {user.email}")
