"""
Catalog Service

All book operations: listing, searching, sampling, CRUD, and the shelf
hierarchy view.

Normalization
=============
Every text field is trimmed. Title is upper-cased. Author, publisher,
publication year and location are upper-cased, or replaced by a sentinel
when empty (S.A, S.E, S.F, ---). Rows are never stored raw.

Uniqueness
==========
ISBN and location are checked before writing, but the unique constraints
decide: an IntegrityError at commit becomes a ConflictError.

Covers
======
Covers are written only after the row is committed. Failures on the cover
directory are logged and never undo the row change.
"""

import logging
import re
from dataclasses import dataclass

from sqlalchemy import case, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from catalog.models import Book
from catalog.models.book import NO_AUTHOR, NO_LOCATION, NO_PUBLISHER, NO_YEAR
from catalog.schemas.book import MAX_ISBN, BookCreate, BookUpdate
from catalog.services.covers import CoverStore, CoverUpload

logger = logging.getLogger(__name__)

# Sentinel substituted for each categorical field when it is empty
SENTINELS = {
    "author": NO_AUTHOR,
    "publisher": NO_PUBLISHER,
    "publication_year": NO_YEAR,
    "location": NO_LOCATION,
}

SORT_KEYS = {"title", "author", "publisher", "publication_year", "id"}
SORT_ALIASES = {"publicationYear": "publication_year"}
DEFAULT_SORT = "title"

_SLOT_DIGITS = re.compile(r"\d+")


def normalize_field(name: str, value: str) -> str:
    """
    Trim and upper-case a text field, substituting its sentinel when empty.

    Example:
        >>> normalize_field("author", "  borges ")
        'BORGES'
        >>> normalize_field("publisher", "")
        'S.E'
    """
    cleaned = value.strip()
    if not cleaned and name in SENTINELS:
        return SENTINELS[name]
    return cleaned.upper()


def parse_isbn(value: str) -> int:
    """Parse an ISBN path parameter, raising InvalidArgumentError if unusable."""
    cleaned = value.strip() if value else ""
    if not cleaned:
        raise InvalidArgumentError("ISBN is required.")
    if not cleaned.isdigit() or int(cleaned) > MAX_ISBN:
        raise InvalidArgumentError("ISBN must be an integer.")
    return int(cleaned)


# =============================================================================
# Shelf Hierarchy
# =============================================================================
@dataclass(frozen=True)
class ShelfSlot:
    """A location code split into its parts: "E-G06" -> (E, G, 6)."""

    shelf: str
    section: str
    number: int | None


def parse_location(location: str) -> ShelfSlot | None:
    """
    Split a location code on its first '-'.

    Returns None for codes that do not name a shelf, which includes the
    "---" sentinel and codes without a '-'.

    Example:
        >>> parse_location("A-V10")
        ShelfSlot(shelf='A', section='V', number=10)
        >>> parse_location("A-V")
        ShelfSlot(shelf='A', section='V', number=None)
        >>> parse_location("---") is None
        True
    """
    shelf, sep, rest = location.partition("-")
    if not sep or not shelf:
        return None

    section = rest[:1]
    match = _SLOT_DIGITS.match(rest[1:])
    number = int(match.group()) if match else None
    return ShelfSlot(shelf=shelf, section=section, number=number)


def group_books_by_location(books: list[Book]) -> list[dict]:
    """
    Build the shelf -> section -> books view.

    Shelves and sections are sorted ascending; books inside a section by
    slot number, books without a numeric slot last, ties broken by id.
    """
    shelves: dict[str, dict[str, list[tuple[Book, int | None]]]] = {}
    for book in books:
        slot = parse_location(book.location)
        if slot is None:
            continue
        sections = shelves.setdefault(slot.shelf, {})
        sections.setdefault(slot.section, []).append((book, slot.number))

    def slot_order(entry):
        book, number = entry
        return (number is None, number or 0, book.id)

    result = []
    for shelf in sorted(shelves):
        sections = shelves[shelf]
        result.append({
            "shelf": shelf,
            "sections": [
                {
                    "section": section,
                    "books": [
                        _book_with_slot(book, number)
                        for book, number in sorted(sections[section], key=slot_order)
                    ],
                }
                for section in sorted(sections)
            ],
        })
    return result


def _book_with_slot(book: Book, number: int | None) -> dict:
    return {
        "id": book.id,
        "isbn": book.isbn,
        "title": book.title,
        "author": book.author,
        "publisher": book.publisher,
        "publication_year": book.publication_year,
        "location": book.location,
        "number": number,
    }


# =============================================================================
# Service
# =============================================================================
class CatalogService:
    """
    Book operations over one database session.

    Args:
        db: Database session for the current request
        covers: Cover image store
    """

    def __init__(self, db: Session, covers: CoverStore) -> None:
        self.db = db
        self.covers = covers

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------
    def count(self) -> int:
        return self.db.execute(select(func.count(Book.id))).scalar_one()

    def random_sample(self, n) -> list[Book]:
        """
        Up to n books in random order.

        Raises:
            InvalidArgumentError: n is not a positive integer
            NotFoundError: the catalog is empty
        """
        if isinstance(n, str):
            n = n.strip()
            if not n.isdigit():
                raise InvalidArgumentError("Count must be a positive integer.")
            n = int(n)
        if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
            raise InvalidArgumentError("Count must be a positive integer.")

        total = self.count()
        if total == 0:
            raise NotFoundError("No books available.")

        # LIMIT must fit the column type; the catalog size always does
        stmt = select(Book).order_by(func.random()).limit(min(n, total))
        return list(self.db.execute(stmt).scalars().all())

    @staticmethod
    def _order_by(sort_key: str) -> list:
        sort_key = SORT_ALIASES.get(sort_key, sort_key)
        if sort_key not in SORT_KEYS:
            sort_key = DEFAULT_SORT

        if sort_key == "author":
            return [case((Book.author == NO_AUTHOR, 1), else_=0), Book.author.asc()]
        if sort_key == "publisher":
            return [case((Book.publisher == NO_PUBLISHER, 1), else_=0), Book.publisher.asc()]
        if sort_key == "publication_year":
            return [
                case((Book.publication_year == NO_YEAR, 1), else_=0),
                Book.publication_year.desc(),
            ]
        if sort_key == "id":
            return [Book.id.desc()]
        return [Book.title.asc()]

    def list_all(self, sort_key: str = DEFAULT_SORT) -> list[Book]:
        """
        Every book, ordered by sort_key.

        Sentinel rows (S.A, S.E, S.F) go after real values; unknown keys
        fall back to title.
        """
        stmt = select(Book).order_by(*self._order_by(sort_key))
        return list(self.db.execute(stmt).scalars().all())

    def search(self, keyword: str) -> list[Book]:
        """Substring search across the catalog, ordered by title."""
        term = (keyword or "").strip()
        if not term:
            return self.list_all(DEFAULT_SORT)

        # autoescape: % and _ in the keyword match literally
        conditions = [
            Book.title.icontains(term, autoescape=True),
            Book.author.icontains(term, autoescape=True),
            Book.publisher.icontains(term, autoescape=True),
            Book.publication_year == term.upper(),
            Book.location.icontains(term, autoescape=True),
        ]
        if term.isdigit() and int(term) <= MAX_ISBN:
            conditions.append(Book.isbn == int(term))

        stmt = select(Book).where(or_(*conditions)).order_by(Book.title.asc())
        return list(self.db.execute(stmt).scalars().all())

    def _find_by_isbn(self, isbn: int) -> Book | None:
        return self.db.execute(select(Book).where(Book.isbn == isbn)).scalar_one_or_none()

    def _find_by_location(self, location: str) -> Book | None:
        return self.db.execute(
            select(Book).where(Book.location == location)
        ).scalar_one_or_none()

    def get_by_isbn(self, isbn: str | int) -> Book:
        """
        Raises:
            InvalidArgumentError: isbn is blank or not an integer
            NotFoundError: no book with this isbn
        """
        value = isbn if isinstance(isbn, int) else parse_isbn(isbn)
        book = self._find_by_isbn(value)
        if book is None:
            raise NotFoundError("Book not found.")
        return book

    def group_by_location(self) -> list[dict]:
        books = self.db.execute(select(Book).order_by(Book.id)).scalars().all()
        return group_books_by_location(list(books))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------
    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning("Unique constraint rejected a book write")
            raise ConflictError("ISBN or location already in use.") from None

    def _store_cover(self, isbn: int, cover: CoverUpload) -> None:
        try:
            self.covers.save(self.covers.key_for(isbn, cover.filename), cover.data)
        except OSError as e:
            logger.error(f"Could not store cover for ISBN {isbn}: {e}")

    def add(self, fields: BookCreate, cover: CoverUpload | None = None) -> Book:
        """
        Create a book, then store its cover.

        Raises:
            ConflictError: isbn or location already taken
        """
        if self._find_by_isbn(fields.isbn) is not None:
            raise ConflictError("A book with this ISBN already exists.")

        location = normalize_field("location", fields.location)
        if self._find_by_location(location) is not None:
            raise ConflictError("This location is already in use.")

        book = Book(
            isbn=fields.isbn,
            title=fields.title.strip().upper(),
            author=normalize_field("author", fields.author),
            publisher=normalize_field("publisher", fields.publisher),
            publication_year=normalize_field("publication_year", fields.publication_year),
            location=location,
        )
        self.db.add(book)
        self._commit()
        self.db.refresh(book)

        logger.info(f"Book added: ISBN {book.isbn} at {book.location}")

        if cover is not None:
            self._store_cover(book.isbn, cover)
        return book

    def update(
        self,
        isbn: str | int,
        fields: BookUpdate,
        cover: CoverUpload | None = None,
    ) -> Book:
        """
        Overwrite the supplied fields of a book; omitted fields are unchanged.

        Raises:
            NotFoundError: no book with this isbn
            ConflictError: new location or isbn belongs to another book
            InvalidArgumentError: title supplied empty
        """
        book = self.get_by_isbn(isbn)
        old_isbn = book.isbn
        changes = fields.model_dump(exclude_unset=True)

        if "location" in changes:
            location = normalize_field("location", changes["location"] or "")
            owner = self._find_by_location(location)
            if owner is not None and owner.id != book.id:
                raise ConflictError("This location is already in use.")
            changes["location"] = location

        new_isbn = changes.get("isbn")
        if new_isbn is not None and new_isbn != book.isbn:
            if self._find_by_isbn(new_isbn) is not None:
                raise ConflictError("A book with this ISBN already exists.")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise InvalidArgumentError("Title cannot be empty.")
            book.title = title.upper()

        if new_isbn is not None:
            book.isbn = new_isbn
        for name in ("author", "publisher", "publication_year"):
            if name in changes:
                setattr(book, name, normalize_field(name, changes[name] or ""))
        if "location" in changes:
            book.location = changes["location"]

        self._commit()
        self.db.refresh(book)

        logger.info(f"Book updated: ISBN {old_isbn} -> {book.isbn}")

        if cover is not None:
            if book.isbn != old_isbn:
                try:
                    self.covers.delete(old_isbn)
                except OSError as e:
                    logger.error(f"Could not remove old cover for ISBN {old_isbn}: {e}")
            self._store_cover(book.isbn, cover)
        elif book.isbn != old_isbn:
            try:
                self.covers.rename(old_isbn, book.isbn)
            except OSError as e:
                logger.error(f"Could not re-key cover {old_isbn} -> {book.isbn}: {e}")
        return book

    def delete(self, isbn: str | int) -> None:
        """
        Remove a book and, best effort, its cover.

        Raises:
            NotFoundError: no book with this isbn
        """
        book = self.get_by_isbn(isbn)
        try:
            removed = self.covers.delete(book.isbn)
            logger.debug(f"Removed {removed} cover file(s) for ISBN {book.isbn}")
        except OSError as e:
            logger.error(f"Could not remove cover for ISBN {book.isbn}: {e}")

        self.db.delete(book)
        self.db.commit()

        logger.info(f"Book deleted: ISBN {book.isbn}")
