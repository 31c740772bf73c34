"""
Modulith Backend — Task Service
================================

What:  Business operations on tasks.
How:   Stateless free functions; each receives the session and delegates to
       the repository. The only logic living here is defaulting
       `completed` on create and composing the stats.

"Not found" propagates unchanged as None/False for the controller to map.
"""

import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from modulith.modules.tasks import repository
from modulith.modules.tasks.models import Task
from modulith.modules.tasks.schemas import CreateTaskDTO, TaskStats, UpdateTaskDTO

logger = logging.getLogger(__name__)


async def get_all_tasks(session: AsyncSession) -> List[Task]:
    return await repository.find_all(session)


async def get_tasks_by_status(session: AsyncSession, completed: bool) -> List[Task]:
    return await repository.find_by_status(session, completed)


async def get_task_by_id(session: AsyncSession, task_id: str) -> Optional[Task]:
    return await repository.find_by_id(session, task_id)


async def create_task(session: AsyncSession, dto: CreateTaskDTO) -> Task:
    """Persist a new task; `completed` is False unless the client sent it."""
    return await repository.create(
        session,
        {
            "title": dto.title,
            "completed": dto.completed if dto.completed is not None else False,
        },
    )


async def update_task(
    session: AsyncSession, task_id: str, dto: UpdateTaskDTO
) -> Optional[Task]:
    """Apply only the fields present in the request."""
    return await repository.update(session, task_id, dto.changes())


async def delete_task(session: AsyncSession, task_id: str) -> bool:
    return await repository.delete_by_id(session, task_id)


async def get_task_stats(session: AsyncSession) -> TaskStats:
    """
    Count all tasks and completed tasks; pending is derived.

    One aggregate query, no rows loaded, so pending is never negative.
    """
    total, completed = await repository.count_by_completion(session)
    logger.debug("Task stats: total=%d completed=%d", total, completed)
    return TaskStats(total=total, completed=completed, pending=total - completed)
