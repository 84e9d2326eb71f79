"""
Pydantic Schemas Package

Pydantic models for request/response validation, kept separate from the
SQLAlchemy models so the API controls exactly what is exposed.

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from catalog.schemas.book import (
    BookCountResponse,
    BookCreate,
    BookResponse,
    BookUpdate,
    BookWithSlot,
    MessageResponse,
    SectionGroup,
    ShelfGroup,
)
from catalog.schemas.user import (
    LoginRequest,
    PasswordUpdateRequest,
    UserResponse,
)

__all__ = [
    # Book schemas
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookWithSlot",
    "SectionGroup",
    "ShelfGroup",
    "BookCountResponse",
    "MessageResponse",
    # User schemas
    "LoginRequest",
    "PasswordUpdateRequest",
    "UserResponse",
]
