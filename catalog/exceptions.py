"""
Catalog Error Taxonomy

Services raise these exceptions instead of HTTPException so they stay usable
outside a request (scripts, tests). main.py registers a handler that renders
every CatalogError as {"error": message} with the matching status code.

- InvalidArgumentError: bad input shape or constraint (400)
- UnauthorizedError: missing/invalid/expired token or credential mismatch (401)
- NotFoundError: no matching row (404)
- ConflictError: uniqueness violation (409)

Anything else that escapes a route is an Internal error (500) and its detail
is never sent to the caller.
"""

from fastapi import status


class CatalogError(Exception):
    """Base exception for expected catalog failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(CatalogError):
    """Input failed a shape or constraint check."""

    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(CatalogError):
    """Caller could not be authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class NotFoundError(CatalogError):
    """Requested row does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(CatalogError):
    """A unique field (isbn, location, email) is already taken."""

    status_code = status.HTTP_409_CONFLICT


class InvalidTokenError(Exception):
    """
    Raised by TokenService.verify.

    Kept separate from UnauthorizedError so the signature/expiry reason can be
    logged by the gate without ever reaching the response body.
    """
