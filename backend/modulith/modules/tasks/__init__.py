"""Tasks module: the example CRUD slice mounted under /tasks."""

from modulith.modules.tasks.models import Task
from modulith.modules.tasks.routes import router

__all__ = ["Task", "router"]
