# Routes package init
"""
Modulith Backend — Root API Router
===================================

What:  Mounts every feature module's router under its path prefix.
How:   `api_router` is included once by create_app(); adding a module means
       adding one include_router line here.

Route Inventory:
    /tasks      modulith.modules.tasks.routes
    /health     modulith.routes.health (mounted separately, outside the API)
"""

from fastapi import APIRouter

from modulith.modules.tasks.routes import router as tasks_router

api_router = APIRouter()
api_router.include_router(tasks_router, prefix="/tasks")
