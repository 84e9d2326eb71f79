#!/usr/bin/env python3
"""
Database Seed Script

Creates the librarian account and, optionally, a handful of sample books.
The API has no registration endpoint: this script is how users are made.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py --email librarian@example.com --password 'S3cret!'

    # Also load sample books, replacing any existing ones
    python scripts/seed_data.py --email librarian@example.com --password 'S3cret!' \\
        --books --clear

This script:
1. Connects to the database using app settings
2. Creates the tables if they don't exist
3. Creates the user, or resets its password if the email already exists
4. Clears and/or loads sample books (optional)
"""

import argparse
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.database import SessionLocal, create_tables
from catalog.exceptions import ConflictError
from catalog.models import Book, User
from catalog.schemas.book import BookCreate
from catalog.services.catalog import CatalogService
from catalog.services.covers import CoverStore
from catalog.services.security import hash_password

SAMPLE_BOOKS = [
    {
        "isbn": "9780307474728",
        "title": "Cien años de soledad",
        "author": "Gabriel García Márquez",
        "publisher": "Editorial Sudamericana",
        "publication_year": "1967",
        "location": "A-V10",
    },
    {
        "isbn": "9789875666283",
        "title": "Ficciones",
        "author": "Jorge Luis Borges",
        "publisher": "Debolsillo",
        "publication_year": "1944",
        "location": "A-V02",
    },
    {
        "isbn": "9505043651",
        "title": "Apicultura práctica",
        "author": "Aldo L. Persano",
        "publisher": "Hemisferio Sur",
        "publication_year": "1992",
        "location": "E-G06",
    },
    {
        "isbn": "9788437604947",
        "title": "Rayuela",
        "author": "Julio Cortázar",
        "publisher": "Cátedra",
        "publication_year": "1963",
        "location": "B-N01",
    },
    {
        "isbn": "9789500720274",
        "title": "Manual de huerta orgánica",
        "author": "",
        "publisher": "",
        "publication_year": "",
        "location": "E-G01",
    },
]


def seed_user(db: Session, email: str, password: str) -> None:
    """Create the user, or reset its password if it already exists."""
    email = email.strip().lower()
    user = db.execute(select(User).where(User.email == email)).scalar_one_or_none()

    if user is None:
        db.add(User(email=email, password=hash_password(password)))
        print(f"Created user {email}.")
    else:
        user.password = hash_password(password)
        print(f"Reset password for {email}.")
    db.commit()


def clear_books(db: Session) -> None:
    """Clear all existing books (covers are left on disk)."""
    print("Clearing existing books...")
    db.execute(delete(Book))
    db.commit()
    print("Books cleared.")


def seed_books(db: Session) -> int:
    """Load the sample books through the catalog service so they are normalized."""
    settings = get_settings()
    catalog = CatalogService(db, CoverStore(settings.covers_dir))

    created = 0
    for data in SAMPLE_BOOKS:
        try:
            catalog.add(BookCreate.model_validate(data))
            created += 1
        except ConflictError as e:
            print(f"  Skipping {data['isbn']}: {e.message}")

    print(f"Created {created} books.")
    return created


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Seed the library catalog database.")
    parser.add_argument("--email", required=True, help="Librarian email address")
    parser.add_argument("--password", required=True, help="Librarian password")
    parser.add_argument("--books", action="store_true", help="Load sample books")
    parser.add_argument("--clear", action="store_true", help="Delete existing books first")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    create_tables()
    db = SessionLocal()

    try:
        seed_user(db, args.email, args.password)
        if args.clear:
            clear_books(db)
        if args.books:
            seed_books(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
