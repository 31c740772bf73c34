"""
Modulith Backend — Task Controller
===================================

What:  HTTP handlers for the tasks module.
How:   Parse the request, validate untrusted input, call the service, map
       the outcome to a status code and JSON body. No business logic.

Status mapping:
    list / get / update  → 200        create → 201        delete → 204
    validation failure   → 400 {"error": [issues]}
    None/False from the service → 404 {"error": "Task not found"}

Request bodies are read here rather than declared as FastAPI body
parameters, so that malformed JSON, a missing body and a schema violation
all produce the same 400 issue list.
"""

import json
import logging
from typing import Any, List, Optional, Tuple

from fastapi import Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from modulith.database import get_db_session
from modulith.modules.tasks import service
from modulith.modules.tasks.schemas import (
    Issue,
    TaskResponse,
    TaskStats,
    validate_create,
    validate_update,
)

logger = logging.getLogger(__name__)

TASK_NOT_FOUND = "Task not found"


def _not_found() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": TASK_NOT_FOUND})


def _bad_request(issues: List[Issue]) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": issues})


async def _read_json(request: Request) -> Tuple[Any, List[Issue]]:
    """
    Decode the request body.

    An empty body decodes to None (which then fails schema validation);
    undecodable bytes yield an `invalid_json` issue.
    """
    raw = await request.body()
    if not raw:
        return None, []
    try:
        return json.loads(raw), []
    except ValueError as exc:
        return None, [{"code": "invalid_json", "path": [], "message": f"Malformed JSON body: {exc}"}]


async def list_tasks(
    completed: Optional[bool] = Query(
        default=None,
        description="Only return tasks with this completion state",
    ),
    session: AsyncSession = Depends(get_db_session),
) -> List[TaskResponse]:
    """GET /tasks: all tasks newest first, optionally filtered by status."""
    if completed is None:
        tasks = await service.get_all_tasks(session)
    else:
        tasks = await service.get_tasks_by_status(session, completed)
    return [TaskResponse.model_validate(task) for task in tasks]


async def get_task_stats(session: AsyncSession = Depends(get_db_session)) -> TaskStats:
    """GET /tasks/stats"""
    return await service.get_task_stats(session)


async def get_task(task_id: str, session: AsyncSession = Depends(get_db_session)):
    """GET /tasks/{task_id}"""
    task = await service.get_task_by_id(session, task_id)
    if task is None:
        return _not_found()
    return TaskResponse.model_validate(task)


async def create_task(request: Request, session: AsyncSession = Depends(get_db_session)):
    """POST /tasks: 201 with the stored entity, or 400 with issues."""
    body, issues = await _read_json(request)
    if issues:
        return _bad_request(issues)

    result = validate_create(body)
    if not result.ok:
        logger.debug("Rejected task create: %s", result.issues)
        return _bad_request(result.issues)

    task = await service.create_task(session, result.value)
    return TaskResponse.model_validate(task)


async def update_task(
    task_id: str,
    request: Request,
    session: AsyncSession = Depends(get_db_session),
):
    """
    PATCH /tasks/{task_id}

    The body is validated before the lookup, so an invalid body on a
    missing task is a 400, not a 404.
    """
    body, issues = await _read_json(request)
    if issues:
        return _bad_request(issues)

    result = validate_update(body)
    if not result.ok:
        logger.debug("Rejected task update %s: %s", task_id, result.issues)
        return _bad_request(result.issues)

    task = await service.update_task(session, task_id, result.value)
    if task is None:
        return _not_found()
    return TaskResponse.model_validate(task)


async def delete_task(task_id: str, session: AsyncSession = Depends(get_db_session)) -> Response:
    """DELETE /tasks/{task_id}: 204 with an empty body."""
    if not await service.delete_task(session, task_id):
        return _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
