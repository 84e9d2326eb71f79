"""
SQLAlchemy Models Package

Two independent tables, no relationships:
- User: librarian credentials
- Book: catalogued books

Import all models here to:
1. Make them available as: from catalog.models import Book, User
2. Ensure Alembic discovers them for migrations
"""

from catalog.models.book import Book
from catalog.models.user import User

__all__ = [
    "Book",
    "User",
]
