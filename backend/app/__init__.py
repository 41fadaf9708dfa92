"""
CrudCamp Backend — Application Package
========================================

What: Reference CRUD REST backend (users, JWT auth, per-user tasks) plus the
      project scaffolder used throughout the course.
Who:  Imported by uvicorn (app.main:app), Alembic, pytest, and the
      `crudcamp-scaffold` console script.

Layering:
    ┌─────────────────────────────────────┐
    │   Routes + Dependencies (API Layer) │  ← HTTP concerns, bearer auth
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← hashing, tokens, ownership
    ├─────────────────────────────────────┤
    │    Models (ORM) & Schemas (DTOs)    │  ← SQLAlchemy + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
