"""
Modulith Backend — Task Routes
===============================

Declarative route table for the tasks module. Mounted under /tasks by
modulith.routes; paths here are relative to that prefix.

    GET     ""            → list_tasks
    GET     /stats        → get_task_stats
    GET     /{task_id}    → get_task
    POST    ""            → create_task
    PATCH   /{task_id}    → update_task
    DELETE  /{task_id}    → delete_task

/stats is registered before /{task_id}; routes match in registration order.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, status

from modulith.modules.tasks import controller
from modulith.modules.tasks.schemas import (
    CreateTaskDTO,
    ErrorResponse,
    TaskResponse,
    TaskStats,
    UpdateTaskDTO,
)

NOT_FOUND = {404: {"description": "Task not found", "model": ErrorResponse}}
INVALID = {400: {"description": "Validation failed", "model": ErrorResponse}}


def _json_body(model: Any) -> Dict[str, Any]:
    # Bodies are parsed by the controller; this only documents them
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": model.model_json_schema()}},
        }
    }


ROUTES: List[Dict[str, Any]] = [
    {
        "path": "",
        "endpoint": controller.list_tasks,
        "methods": ["GET"],
        "response_model": List[TaskResponse],
        "responses": INVALID,
        "summary": "List tasks, newest first",
    },
    {
        "path": "/stats",
        "endpoint": controller.get_task_stats,
        "methods": ["GET"],
        "response_model": TaskStats,
        "summary": "Task counts: total, completed, pending",
    },
    {
        "path": "/{task_id}",
        "endpoint": controller.get_task,
        "methods": ["GET"],
        "response_model": TaskResponse,
        "responses": NOT_FOUND,
        "summary": "Get a task by id",
    },
    {
        "path": "",
        "endpoint": controller.create_task,
        "methods": ["POST"],
        "response_model": TaskResponse,
        "status_code": status.HTTP_201_CREATED,
        "responses": INVALID,
        "openapi_extra": _json_body(CreateTaskDTO),
        "summary": "Create a task",
    },
    {
        "path": "/{task_id}",
        "endpoint": controller.update_task,
        "methods": ["PATCH"],
        "response_model": TaskResponse,
        "responses": {**INVALID, **NOT_FOUND},
        "openapi_extra": _json_body(UpdateTaskDTO),
        "summary": "Update some fields of a task",
    },
    {
        "path": "/{task_id}",
        "endpoint": controller.delete_task,
        "methods": ["DELETE"],
        "response_model": None,
        "status_code": status.HTTP_204_NO_CONTENT,
        "responses": NOT_FOUND,
        "summary": "Delete a task",
    },
]

router = APIRouter(tags=["Tasks"])

for route in ROUTES:
    router.add_api_route(**route)
