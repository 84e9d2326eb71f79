"""
Books Router

Catalog endpoints: public reads and bearer-protected writes.

Route order matters: the fixed paths (/count, /random, /location, /search,
/isbn) are registered before the catch-all /{sort_by}.

Writes are multipart forms so a cover image can travel with the fields:
    curl -X POST /api/books -H "Authorization: Bearer $token" \\
        -F isbn=9780307474728 -F "title=Cien años de soledad" \\
        -F location=A-V10 -F cover=@portada.jpg;type=image/jpeg
"""

from fastapi import APIRouter, Request, status

from catalog.config import get_settings
from catalog.dependencies import (
    BookCreateForm,
    BookUpdateForm,
    Catalog,
    CoverFile,
    CurrentIdentity,
)
from catalog.schemas import (
    BookCountResponse,
    BookResponse,
    MessageResponse,
    ShelfGroup,
)
from catalog.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Read Endpoints
# =============================================================================

@router.get(
    "/count",
    response_model=BookCountResponse,
    summary="Count books",
)
def count_books(catalog: Catalog) -> dict:
    return {"count": catalog.count()}


@router.get(
    "/random/{count}",
    response_model=list[BookResponse],
    summary="Random books",
    description="Up to `count` books in random order.",
    responses={400: {"description": "Count is not a positive integer"}},
)
def random_books(count: str, catalog: Catalog):
    return catalog.random_sample(count)


@router.get(
    "/location",
    response_model=list[ShelfGroup],
    summary="Books by shelf",
    description="""
    Books grouped by shelf and section, ordered by slot number.

    A location such as `E-G06` is read as shelf `E`, section `G`, slot `6`.
    Books without a shelf (location `---`) are left out.
    """,
)
def books_by_location(catalog: Catalog):
    return catalog.group_by_location()


@router.get(
    "",
    response_model=list[BookResponse],
    summary="List books",
    description="Every book, ordered by title.",
)
def list_books(catalog: Catalog):
    return catalog.list_all()


@router.get(
    "/search/{keyword}",
    response_model=list[BookResponse],
    summary="Search books",
    description="""
    Match the keyword against the catalog:
    - ISBN (exact, numeric keywords only)
    - title, author, publisher, location (substring, case-insensitive)
    - publication year (exact)

    Results are ordered by title.
    """,
)
def search_books(keyword: str, catalog: Catalog):
    return catalog.search(keyword)


@router.get(
    "/isbn/{isbn}",
    response_model=BookResponse,
    summary="Get book by ISBN",
    responses={400: {"description": "ISBN is not an integer"}},
)
def get_book(isbn: str, catalog: Catalog):
    return catalog.get_by_isbn(isbn)


@router.get(
    "/{sort_by}",
    response_model=list[BookResponse],
    summary="List books sorted",
    description="""
    Every book ordered by `sort_by`:
    - `title` (default for unknown keys)
    - `author`, `publisher`: books without one (S.A / S.E) last
    - `publication_year` (or `publicationYear`): newest first, S.F last
    - `id`: newest first
    """,
)
def list_books_sorted(sort_by: str, catalog: Catalog):
    return catalog.list_all(sort_by)


# =============================================================================
# Write Endpoints (bearer token required)
# =============================================================================

@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a book",
    responses={409: {"description": "ISBN or location already in use"}},
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    identity: CurrentIdentity,
    fields: BookCreateForm,
    cover: CoverFile,
    catalog: Catalog,
) -> dict:
    catalog.add(fields, cover)
    return {"message": "Book stored successfully."}


@router.put(
    "/{book_isbn}",
    response_model=MessageResponse,
    summary="Update a book",
    description="Only the fields sent are changed.",
    responses={409: {"description": "ISBN or location already in use"}},
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_isbn: str,
    identity: CurrentIdentity,
    fields: BookUpdateForm,
    cover: CoverFile,
    catalog: Catalog,
) -> dict:
    catalog.update(book_isbn, fields, cover)
    return {"message": "Book updated successfully."}


@router.delete(
    "/{book_isbn}",
    response_model=MessageResponse,
    summary="Delete a book",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_isbn: str,
    identity: CurrentIdentity,
    catalog: Catalog,
) -> dict:
    catalog.delete(book_isbn)
    return {"message": "Book deleted successfully."}
