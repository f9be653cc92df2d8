"""
CatHealth Backend — Application Package
========================================

Multi-user cat health tracker: cats, health records (vaccinations,
checkups, medications), insurance policies, a health calendar and to-dos.

Layers:

    ┌─────────────────────────────────────┐
    │   Routes (API) + Authorization Gate │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (ownership, business)    │  ← 404/403 checks, cascades
    ├─────────────────────────────────────┤
    │   Models & Schemas                  │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database / FileService            │  ← async sessions, upload storage
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
