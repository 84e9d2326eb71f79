"""
Book Pydantic Schemas

Request schemas validate the multipart form fields sent by the catalog
front end; response schemas mirror the columns of the books table plus the
derived shelf hierarchy returned by GET /books/location.

Field names keep the wire format of the existing clients
(publication_year, not publicationYear).
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.models.book import (
    AUTHOR_MAX_LENGTH,
    LOCATION_MAX_LENGTH,
    PUBLISHER_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    YEAR_MAX_LENGTH,
)

# Largest value a BIGINT column can hold
MAX_ISBN = 2**63 - 1


def _parse_isbn(v):
    """Accept an ISBN as digits (string or int), surrounding spaces ignored."""
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("ISBN is required")
        if not cleaned.isdigit():
            raise ValueError("ISBN must contain only digits")
        return int(cleaned)
    return v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class BookCreate(BaseModel):
    """
    Schema for creating a new book.

    Only title and isbn are required. Empty author, publisher,
    publication_year and location are accepted and stored as sentinels.

    Example form fields:
        isbn=9780307474728
        title=Cien años de soledad
        author=Gabriel García Márquez
        publisher=Editorial Sudamericana
        publication_year=1967
        location=A-V10
    """

    isbn: int = Field(
        ...,
        gt=0,
        le=MAX_ISBN,
        description="ISBN as digits only",
        examples=[9780307474728],
    )

    title: str = Field(
        ...,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Book title",
        examples=["Cien años de soledad"],
    )

    author: str = Field(
        default="",
        max_length=AUTHOR_MAX_LENGTH,
        description="Author name (empty for unknown)",
        examples=["Gabriel García Márquez"],
    )

    publisher: str = Field(
        default="",
        max_length=PUBLISHER_MAX_LENGTH,
        description="Publisher (empty for unknown)",
        examples=["Editorial Sudamericana"],
    )

    publication_year: str = Field(
        default="",
        max_length=YEAR_MAX_LENGTH,
        description="Publication year (empty for unknown)",
        examples=["1967"],
    )

    location: str = Field(
        default="",
        max_length=LOCATION_MAX_LENGTH,
        description="Shelf slot as <shelf>-<section><number>",
        examples=["A-V10"],
    )

    @field_validator("isbn", mode="before")
    @classmethod
    def isbn_must_be_numeric(cls, v):
        return _parse_isbn(v)

    @field_validator(
        "title", "author", "publisher", "publication_year", "location",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v):
        """Trim surrounding whitespace before length checks."""
        return _strip(v)


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    All fields are optional: omitted fields are left unchanged, while a field
    sent empty is normalized exactly as on creation (author -> S.A, ...).
    Title is the exception: it cannot be cleared.
    """

    isbn: int | None = Field(
        default=None,
        gt=0,
        le=MAX_ISBN,
        description="New ISBN as digits only",
    )

    title: str | None = Field(
        default=None,
        min_length=1,
        max_length=TITLE_MAX_LENGTH,
        description="Book title",
    )

    author: str | None = Field(
        default=None,
        max_length=AUTHOR_MAX_LENGTH,
        description="Author name",
    )

    publisher: str | None = Field(
        default=None,
        max_length=PUBLISHER_MAX_LENGTH,
        description="Publisher",
    )

    publication_year: str | None = Field(
        default=None,
        max_length=YEAR_MAX_LENGTH,
        description="Publication year",
    )

    location: str | None = Field(
        default=None,
        max_length=LOCATION_MAX_LENGTH,
        description="Shelf slot as <shelf>-<section><number>",
    )

    @field_validator("isbn", mode="before")
    @classmethod
    def isbn_must_be_numeric(cls, v):
        return _parse_isbn(v)

    @field_validator(
        "title", "author", "publisher", "publication_year", "location",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v):
        return _strip(v)


class BookResponse(BaseModel):
    """Schema for book responses."""

    id: int = Field(..., description="Unique identifier")
    isbn: int = Field(..., description="International Standard Book Number")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author or S.A")
    publisher: str = Field(..., description="Publisher or S.E")
    publication_year: str = Field(..., description="Publication year or S.F")
    location: str = Field(..., description="Shelf slot or ---")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 207,
                "isbn": 9505043651,
                "title": "APICULTURA PRÁCTICA",
                "author": "ALDO L. PERSANO",
                "publisher": "HEMISFERIO SUR",
                "publication_year": "1992",
                "location": "E-G06",
            }
        },
    )


class BookWithSlot(BookResponse):
    """A book inside a shelf section, with its parsed slot number."""

    number: int | None = Field(
        default=None,
        description="Slot number parsed from the location (null if not numeric)",
    )


class SectionGroup(BaseModel):
    """Books stored in one section of a shelf, ordered by slot."""

    section: str = Field(..., description="Section letter", examples=["G"])
    books: list[BookWithSlot] = Field(default=[], description="Books by slot")


class ShelfGroup(BaseModel):
    """One shelf and its sections, as returned by GET /books/location."""

    shelf: str = Field(..., description="Shelf letter", examples=["E"])
    sections: list[SectionGroup] = Field(default=[], description="Sections")


class BookCountResponse(BaseModel):
    """Total number of catalogued books."""

    count: int = Field(..., ge=0, examples=[150])


class MessageResponse(BaseModel):
    """Plain confirmation returned by write endpoints."""

    message: str = Field(..., examples=["Book stored successfully."])
