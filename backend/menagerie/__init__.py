"""
Menagerie Backend: Application Package Initializer
===================================================

What: Marks the `menagerie` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend is layered so that HTTP and SQL never meet directly:

    ┌─────────────────────────────────────┐
    │     Routes (API + HTML views)       │  ← binds paths, reads raw requests
    ├─────────────────────────────────────┤
    │   Resource Controller (protocol)    │  ← verb + id + body → status + body
    ├─────────────────────────────────────┤
    │   Storage Gateway (one table)       │  ← parameterized SQL, error classes
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy table + Pydantic shapes
    └─────────────────────────────────────┘

    The controller only sees the gateway's typed outcomes (a row, None, or a
    StorageError subclass) and never raw driver errors.
"""

__version__ = "1.0.0"
