"""
User Model

The catalog has a single implicit role: every row in this table is a
librarian who may log in and edit books. Users are created by the seed
script, never through the API.
"""

from sqlalchemy import CHAR, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class User(Base):
    """
    User model representing a librarian account.

    Table: users

    Indexes:
    - Primary key on id (automatic)
    - email: Unique index for login lookups

    Example:
        user = User(
            email="librarian@example.com",
            password=hash_password("Password123"),
        )
    """

    __tablename__ = "users"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Authentication Fields
    # -------------------------------------------------------------------------
    email: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        index=True,
        nullable=False,
        comment="User's email address (used for login)"
    )

    # bcrypt digests are always 60 characters
    password: Mapped[str] = mapped_column(
        CHAR(60),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    def __repr__(self) -> str:
        """Developer-friendly string representation."""
        return f"User(id={self.id}, email='{self.email}')"
