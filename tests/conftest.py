"""
pytest Fixtures for Library Catalog API Tests

Shared fixtures used across all test files.

For database tests, we use:
- session scope for engine (expensive to create)
- function scope for sessions (isolation between tests)

Cover images are written to pytest's tmp_path, never to uploads/.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
# This disables rate limiting, sets a test secret key and keeps the
# application engine and cover directory away from real resources
import os
import tempfile

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["COVERS_DIR"] = tempfile.mkdtemp(prefix="catalog-covers-")

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db
from catalog.dependencies import get_cover_store
from catalog.main import app
from catalog.models import Book, User
from catalog.services.catalog import CatalogService
from catalog.services.covers import CoverStore
from catalog.services.security import get_token_service, hash_password

TEST_EMAIL = "librarian@example.com"
TEST_PASSWORD = "Password123"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory: fast, isolated, no external database needed.
# ilike() and random() behave the same on PostgreSQL.

@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the connection alive for the entire session.
    Without it, SQLite in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    The session is wrapped in a transaction that's rolled back,
    ensuring test isolation without needing to recreate tables.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def cover_store(tmp_path) -> CoverStore:
    """Cover store rooted in a per-test temporary directory."""
    return CoverStore(tmp_path / "covers")


@pytest.fixture
def catalog(db_session: Session, cover_store: CoverStore) -> CatalogService:
    """CatalogService bound to the test session, for service-level tests."""
    return CatalogService(db_session, cover_store)


@pytest.fixture(scope="function")
def client(
    db_session: Session,
    cover_store: CoverStore,
) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and cover directory.

    We override the get_db and get_cover_store dependencies so requests use
    the per-test session and temporary directory.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cover_store] = lambda: cover_store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================

@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create the librarian account."""
    user = User(email=TEST_EMAIL, password=hash_password(TEST_PASSWORD))
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_token(sample_user: User) -> str:
    return get_token_service().issue(sample_user.id)


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Authorization header for protected routes."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def sample_book(db_session: Session) -> Book:
    """A single, already normalized book."""
    book = Book(
        isbn=9780307474728,
        title="CIEN AÑOS DE SOLEDAD",
        author="GABRIEL GARCÍA MÁRQUEZ",
        publisher="EDITORIAL SUDAMERICANA",
        publication_year="1967",
        location="A-V10",
    )
    db_session.add(book)
    db_session.commit()
    db_session.refresh(book)
    return book


@pytest.fixture
def multiple_books(db_session: Session) -> list[Book]:
    """
    A small shelf with sentinel values mixed in.

    Shelves: A (sections V, N), E (section G); one book has no location.
    """
    rows = [
        (9789875666283, "FICCIONES", "JORGE LUIS BORGES", "DEBOLSILLO", "1944", "A-V02"),
        (9505043651, "APICULTURA PRÁCTICA", "ALDO L. PERSANO", "HEMISFERIO SUR", "1992", "E-G06"),
        (9788437604947, "RAYUELA", "JULIO CORTÁZAR", "CÁTEDRA", "1963", "A-N01"),
        (9789500720274, "MANUAL DE HUERTA", "S.A", "S.E", "S.F", "E-G01"),
        (9780000000001, "BOLETÍN MUNICIPAL", "S.A", "MUNICIPIO", "2001", "---"),
    ]
    books = []
    for isbn, title, author, publisher, year, location in rows:
        book = Book(
            isbn=isbn,
            title=title,
            author=author,
            publisher=publisher,
            publication_year=year,
            location=location,
        )
        db_session.add(book)
        books.append(book)

    db_session.commit()
    for book in books:
        db_session.refresh(book)

    return books
