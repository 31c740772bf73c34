"""
Modulith Backend — Task Repository
===================================

What:  Store access for tasks: one awaited store interaction per function.
How:   Free async functions taking the request's AsyncSession first.
       Mutations commit their own unit of work; nothing here spans
       several calls in one transaction.

Absence is a value, not an exception:
    find_by_id / update  → None when the row does not exist
    delete_by_id         → False when no row was removed

Infrastructure failures (SQLAlchemyError) are logged and re-raised as
DatabaseError; the session scope in modulith.database rolls back.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import case, delete, func, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from modulith.exceptions import DatabaseError
from modulith.modules.tasks.models import Task

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(operation: str, **context: Any) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Database error in %s: %s", operation, exc, exc_info=True)
        raise DatabaseError(context={"operation": operation, **context}) from exc


async def find_all(session: AsyncSession) -> List[Task]:
    """All tasks, newest first."""
    with _store_errors("find_all"):
        result = await session.execute(select(Task).order_by(Task.created_at.desc()))
        return list(result.scalars().all())


async def find_by_status(session: AsyncSession, completed: bool) -> List[Task]:
    """Tasks with the given completion flag, newest first."""
    with _store_errors("find_by_status", completed=completed):
        result = await session.execute(
            select(Task)
            .where(Task.completed == completed)
            .order_by(Task.created_at.desc())
        )
        return list(result.scalars().all())


async def find_by_id(session: AsyncSession, task_id: str) -> Optional[Task]:
    with _store_errors("find_by_id", task_id=task_id):
        return await session.get(Task, task_id)


async def create(session: AsyncSession, data: Dict[str, Any]) -> Task:
    """
    Insert a task and return it with its generated id and created_at.

    `data` holds column values (title, completed); defaults are applied by
    the service, not here.
    """
    with _store_errors("create"):
        task = Task(**data)
        session.add(task)
        await session.commit()
        logger.info("Task created: %s", task.id)
        return task


async def update(
    session: AsyncSession, task_id: str, data: Dict[str, Any]
) -> Optional[Task]:
    """Apply `data` to an existing task. Returns None if it does not exist."""
    with _store_errors("update", task_id=task_id):
        task = await session.get(Task, task_id)
        if task is None:
            return None

        for name, value in data.items():
            setattr(task, name, value)
        await session.commit()
        return task


async def delete_by_id(session: AsyncSession, task_id: str) -> bool:
    """True if a row was removed, False if there was nothing to delete."""
    with _store_errors("delete_by_id", task_id=task_id):
        result = await session.execute(delete(Task).where(Task.id == task_id))
        await session.commit()
        removed = result.rowcount > 0
        if removed:
            logger.info("Task deleted: %s", task_id)
        return removed


async def count(session: AsyncSession, completed: Optional[bool] = None) -> int:
    """Number of tasks, optionally restricted to one completion state."""
    with _store_errors("count", completed=completed):
        query = select(func.count()).select_from(Task)
        if completed is not None:
            query = query.where(Task.completed == completed)
        result = await session.execute(query)
        return result.scalar_one()


async def count_by_completion(session: AsyncSession) -> Tuple[int, int]:
    """
    (total, completed) read in one statement.

    Both numbers come from the same snapshot, so completed <= total holds
    even while other requests insert or update tasks.
    """
    with _store_errors("count_by_completion"):
        result = await session.execute(
            select(
                func.count(),
                func.count(case((Task.completed == true(), 1))),
            ).select_from(Task)
        )
        total, completed = result.one()
        return total, completed
