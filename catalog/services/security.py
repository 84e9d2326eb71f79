"""
Security Service

Handles password hashing and bearer token operations.

Security Features:
==================
1. Password hashing with bcrypt (passlib)
2. Signed, time-limited JWT bearer tokens (python-jose, HS256)
3. Secure password verification

Usage:
    from catalog.services.security import hash_password, verify_password

    hashed = hash_password("Password123")
    is_valid = verify_password("Password123", hashed)

    tokens = get_token_service()
    token = tokens.issue(user.id)
    user_id = tokens.verify(token)
"""

import logging
from datetime import UTC, datetime, timedelta
from functools import lru_cache

from jose import JWTError, jwt
from passlib.context import CryptContext

from catalog.config import get_settings
from catalog.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

# -------------------------------------------------------------------------
# Password Hashing Configuration
# -------------------------------------------------------------------------
# CryptContext handles password hashing with bcrypt
# - deprecated: "auto" means old hashes are automatically upgraded
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """
    Hash a plain text password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password (60 characters)

    Example:
        >>> hashed = hash_password("Password123")
        >>> hashed.startswith("$2b$")
        True
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Uses constant-time comparison to prevent timing attacks. A stored value
    that is not a recognizable hash counts as a mismatch.

    Args:
        plain_password: The password to verify
        hashed_password: The stored bcrypt hash

    Returns:
        True if password matches, False otherwise
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt digest")
        return False


# -------------------------------------------------------------------------
# Bearer Tokens
# -------------------------------------------------------------------------
ALGORITHM = "HS256"


class TokenService:
    """
    Issues and verifies signed bearer tokens.

    The signing key is handed in once at construction; nothing here reads
    configuration afterwards. Tokens expire a fixed number of days after
    issuance and are never refreshed.

    Payload:
        sub: user id as a string
        iat: issuance time
        exp: expiry time
    """

    def __init__(
        self,
        secret_key: str,
        expire_days: int = 30,
        algorithm: str = ALGORITHM,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.lifetime = timedelta(days=expire_days)

    def issue(self, subject_id: int, now: datetime | None = None) -> str:
        """
        Create a token for a user id.

        Args:
            subject_id: ID of the authenticated user
            now: Issuance time (defaults to the current UTC time)

        Returns:
            Encoded JWT string (header.payload.signature)
        """
        issued_at = now or datetime.now(UTC)
        payload = {
            "sub": str(subject_id),
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> int:
        """
        Decode a token and return the user id it was issued for.

        Raises:
            InvalidTokenError: bad signature, malformed token, missing or
                non-numeric subject, or expired token
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except JWTError as e:
            raise InvalidTokenError(str(e)) from e

        subject = payload.get("sub")
        if subject is None or not str(subject).isdigit():
            raise InvalidTokenError("Token subject is missing or malformed")

        return int(subject)


@lru_cache
def get_token_service() -> TokenService:
    """
    Process-wide TokenService built from the cached settings.

    Used as a FastAPI dependency so tests can override it.
    """
    settings = get_settings()
    return TokenService(
        secret_key=settings.secret_key,
        expire_days=settings.token_expire_days,
    )
