"""
LawDesk Backend — Application Package Initializer
==================================================

What: Marks the `lawdesk` directory as a Python package.
Who:  Used by uvicorn (`lawdesk.main:app`), Alembic, and pytest.

Architecture Note:
    The backend follows the same layering for both resources (posts, feedback):

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │     Stores (PostStore, Feedback…)   │  ← slugs, moderation, queries
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Stores are built per request around an injected session, so every layer
    can be exercised in tests with a throwaway database.
"""

__version__ = "1.0.0"
