"""
Test Suite for the Library Catalog API

Test Organization:
- conftest.py: Shared fixtures (test database, client, covers, sample data)
- test_security.py: Password hashing and bearer tokens
- test_auth.py: /api/auth endpoints and the bearer token gate
- test_catalog_service.py: CatalogService and cover store behaviour
- test_location.py: Shelf hierarchy parsing and grouping
- test_books.py: /api/books endpoints

Running Tests:
    pytest
    pytest tests/test_books.py -v
"""
