"""
API Routers Package

Router Structure:
- auth.py: /api/auth/* endpoints (login, current user, password change)
- books.py: /api/books/* endpoints (reads, search, shelf view, CRUD)

Each router is imported and registered in main.py.
"""

from catalog.routers.auth import router as auth_router
from catalog.routers.books import router as books_router

__all__ = [
    "auth_router",
    "books_router",
]
