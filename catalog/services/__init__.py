"""
Services Package

Business logic kept separate from HTTP handling so it can be reused by
scripts and tested in isolation.

Current services:
- auth.py: login, bearer token identity, password change
- catalog.py: book queries, mutations and the shelf view
- covers.py: cover image storage on the local filesystem
- rate_limiter.py: rate limiting with slowapi
- security.py: password hashing and JWT tokens
"""
