"""
Modulith Backend — Application Package
=======================================

What: Modular-monolith REST API boilerplate (FastAPI + async SQLAlchemy).
Who:  Imported by uvicorn (`modulith.main:app`), Alembic, and pytest.

Architecture Note:
    Every feature lives in its own module under `modulith.modules` and is
    split into the same five layers:

    ┌─────────────────────────────────────┐
    │   routes.py      (declarative table)│  ← method + path → controller
    ├─────────────────────────────────────┤
    │   controller.py  (HTTP mapping)     │  ← validate, status codes, JSON
    ├─────────────────────────────────────┤
    │   service.py     (orchestration)    │  ← defaults, aggregates
    ├─────────────────────────────────────┤
    │   repository.py  (store access)     │  ← one query per function
    ├─────────────────────────────────────┤
    │   models.py / schemas.py            │  ← ORM table + pydantic DTOs
    └─────────────────────────────────────┘

    Cross-cutting pieces (config, database client, middleware, error
    handlers) live at the package root and are shared by all modules.
"""

__version__ = "1.0.0"
