# Feature modules package init
"""
Modulith Backend — Feature Modules
===================================

What:  One sub-package per business module.
How:   Each module owns its full vertical slice:

    models.py      ORM mapping (inherits modulith.database.Base)
    schemas.py     DTOs, response models, validate_* functions
    repository.py  store access, one awaited call per function
    service.py     orchestration and defaults
    controller.py  HTTP parsing, validation, status code mapping
    routes.py      declarative route table (an APIRouter)

Modules never import each other; they meet only in modulith.routes.
"""
