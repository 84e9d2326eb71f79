"""
Library Catalog API Application Package

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Error taxonomy rendered as {"error": ...}
- main.py: FastAPI application factory and configuration
- dependencies.py: Dependency injection functions (sessions, services, auth gate)
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Business logic (auth, catalog, covers, rate limiting)
"""

__version__ = "0.1.0"
