"""
Trophy API - Application Package Initializer
==============================================

Architecture Note:
    This backend follows a small layered architecture:

    ┌─────────────────────────────────────┐
    │      Middleware + Routes (HTTP)     │  ← headers, limits, status codes
    ├─────────────────────────────────────┤
    │   Services (validation, store)      │  ← business rules, persistence
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │      Database handle (Persistence)  │  ← engine + sessions, injected
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
