"""
Book Model

The central model of the catalog: one row per physical book on the shelves.

Normalization rules (applied by the CatalogService before persistence):
- title: trimmed and upper-cased
- author / publisher / publication_year / location: trimmed and upper-cased,
  or replaced with a sentinel when empty

The location column encodes the physical position as "<shelf>-<section><slot>",
e.g. "A-V10". There is no separate shelf table; the hierarchy is derived at
query time.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base

# -----------------------------------------------------------------------------
# Sentinel values for empty categorical fields
# -----------------------------------------------------------------------------
NO_AUTHOR = "S.A"
NO_PUBLISHER = "S.E"
NO_YEAR = "S.F"
NO_LOCATION = "---"

# Column widths, shared with the request schemas
TITLE_MAX_LENGTH = 120
AUTHOR_MAX_LENGTH = 100
PUBLISHER_MAX_LENGTH = 50
YEAR_MAX_LENGTH = 6
LOCATION_MAX_LENGTH = 6


class Book(Base):
    """
    Book model representing a catalogued book.

    Table: books

    Fields:
    - isbn: International Standard Book Number (unique, 64-bit to hold ISBN-13)
    - title: Book title (upper-cased)
    - author: Author name or "S.A"
    - publisher: Publisher name or "S.E"
    - publication_year: Free text year or "S.F" (not numeric on purpose)
    - location: Shelf slot code or "---" (unique)

    Indexes:
    - Primary key on id (automatic)
    - isbn: Unique index for lookups and mutations
    - location: Unique index, two books cannot occupy the same slot
    - title: Index for the default sort and search

    Example:
        book = Book(
            isbn=9780307474728,
            title="CIEN AÑOS DE SOLEDAD",
            author="GABRIEL GARCÍA MÁRQUEZ",
            publisher="EDITORIAL SUDAMERICANA",
            publication_year="1967",
            location="A-V10",
        )
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Identification
    # -------------------------------------------------------------------------
    # BigInteger because a 13-digit ISBN overflows a 32-bit integer
    isbn: Mapped[int] = mapped_column(
        BigInteger,
        unique=True,
        index=True,
        nullable=False,
        comment="International Standard Book Number"
    )

    # -------------------------------------------------------------------------
    # Bibliographic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(TITLE_MAX_LENGTH),
        index=True,
        nullable=False,
        comment="Book title, upper-cased"
    )

    author: Mapped[str] = mapped_column(
        String(AUTHOR_MAX_LENGTH),
        nullable=False,
        comment="Author name, upper-cased, or S.A when unknown"
    )

    publisher: Mapped[str] = mapped_column(
        String(PUBLISHER_MAX_LENGTH),
        nullable=False,
        comment="Publisher name, upper-cased, or S.E when unknown"
    )

    publication_year: Mapped[str] = mapped_column(
        String(YEAR_MAX_LENGTH),
        nullable=False,
        comment="Publication year, or S.F when unknown"
    )

    # -------------------------------------------------------------------------
    # Physical Location
    # -------------------------------------------------------------------------
    location: Mapped[str] = mapped_column(
        String(LOCATION_MAX_LENGTH),
        unique=True,
        nullable=False,
        comment="Shelf slot as <shelf>-<section><number>, or ---"
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, isbn={self.isbn}, location='{self.location}')"
