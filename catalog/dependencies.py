"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

WHY Dependency Injection?
=========================
1. Reusability: Write once, use in many routes
2. Testing: Easy to swap in tests (database, cover directory, token service)
3. Separation of Concerns: Routes only translate HTTP to service calls

Dependencies defined here:
- DbSession: per-request database session
- AuthService / CatalogService factories
- CurrentIdentity: the bearer token gate for protected routes
- Book form parsing and cover upload validation
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.database import get_db
from catalog.exceptions import InvalidArgumentError, UnauthorizedError
from catalog.schemas.book import BookCreate, BookUpdate
from catalog.services.auth import AuthService, Identity
from catalog.services.catalog import CatalogService
from catalog.services.covers import CoverStore, CoverUpload
from catalog.services.security import TokenService, get_token_service

logger = logging.getLogger(__name__)
settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def get_books(db: Session = Depends(get_db)):
#
# You can write:
#   def get_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


# =============================================================================
# Services
# =============================================================================
@lru_cache
def get_cover_store() -> CoverStore:
    """Process-wide cover store rooted at settings.covers_dir."""
    return CoverStore(settings.covers_dir)


CoverStoreDep = Annotated[CoverStore, Depends(get_cover_store)]


def get_auth_service(db: DbSession, tokens: TokenServiceDep) -> AuthService:
    return AuthService(db, tokens)


def get_catalog_service(db: DbSession, covers: CoverStoreDep) -> CatalogService:
    return CatalogService(db, covers)


Auth = Annotated[AuthService, Depends(get_auth_service)]
Catalog = Annotated[CatalogService, Depends(get_catalog_service)]


# =============================================================================
# Request Gate
# =============================================================================
# auto_error=False: a missing or malformed header reaches our dependency as
# None, so the response is our {"error": ...} body instead of FastAPI's 403.
bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    auth: Auth,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> Identity:
    """
    Resolve the bearer token into the caller's identity.

    Every failure is a plain 401 "Unauthorized"; the reason is only logged.

    Usage:
        @router.get("/me")
        def me(identity: CurrentIdentity):
            return {"id": identity.id, "email": identity.email}
    """
    if credentials is None or not credentials.credentials:
        logger.debug("Request without bearer credentials")
        raise UnauthorizedError()

    return auth.resolve_identity(credentials.credentials)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]


# =============================================================================
# Book Forms
# =============================================================================
# Book writes arrive as multipart forms (fields + optional "cover" file).
# The form is read directly so a field sent empty can be told apart from a
# field that was not sent at all.

async def _form_fields(request: Request) -> dict[str, str]:
    form = await request.form()
    return {
        key: value
        for key, value in form.items()
        if key != "cover" and isinstance(value, str)
    }


async def book_create_form(request: Request) -> BookCreate:
    """Validate the fields of a new book."""
    try:
        return BookCreate.model_validate(await _form_fields(request))
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from None


async def book_update_form(request: Request) -> BookUpdate:
    """Validate the fields of a book update; only sent fields are set."""
    try:
        return BookUpdate.model_validate(await _form_fields(request))
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from None


async def get_cover_upload(
    cover: Annotated[UploadFile | None, File(description="JPEG cover image")] = None,
) -> CoverUpload | None:
    """
    Accept an optional cover image.

    Rules:
    - content type image/jpeg
    - filename extension .jpg (any case)
    - at most settings.max_cover_size_mb

    Raises:
        InvalidArgumentError: any rule is broken
    """
    if cover is None or not cover.filename:
        return None

    if cover.content_type != "image/jpeg" or Path(cover.filename).suffix.lower() != ".jpg":
        raise InvalidArgumentError("Cover must be a .jpg image.")

    limit = settings.max_cover_size_bytes
    data = await cover.read(limit + 1)
    if len(data) > limit:
        raise InvalidArgumentError(
            f"Cover image must be {settings.max_cover_size_mb} MB or smaller."
        )

    return CoverUpload(filename=cover.filename, data=data)


BookCreateForm = Annotated[BookCreate, Depends(book_create_form)]
BookUpdateForm = Annotated[BookUpdate, Depends(book_update_form)]
CoverFile = Annotated[CoverUpload | None, Depends(get_cover_upload)]
