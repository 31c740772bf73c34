"""
Modulith Backend — Task Service Unit Tests
===========================================

The repository is patched with AsyncMocks; no store is involved.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from modulith.modules.tasks import service
from modulith.modules.tasks.schemas import CreateTaskDTO, TaskStats, UpdateTaskDTO

REPO = "modulith.modules.tasks.service.repository"


class TestCreateTask:

    @pytest.mark.asyncio
    async def test_defaults_completed_to_false(self, mock_db_session):
        with patch(f"{REPO}.create", new=AsyncMock()) as create:
            await service.create_task(mock_db_session, CreateTaskDTO(title="t"))

        create.assert_awaited_once_with(mock_db_session, {"title": "t", "completed": False})

    @pytest.mark.asyncio
    async def test_keeps_explicit_completed(self, mock_db_session):
        with patch(f"{REPO}.create", new=AsyncMock()) as create:
            await service.create_task(mock_db_session, CreateTaskDTO(title="t", completed=True))

        create.assert_awaited_once_with(mock_db_session, {"title": "t", "completed": True})


class TestUpdateTask:

    @pytest.mark.asyncio
    async def test_passes_only_sent_fields(self, mock_db_session):
        dto = UpdateTaskDTO.model_validate({"title": "new"})

        with patch(f"{REPO}.update", new=AsyncMock(return_value=MagicMock())) as update:
            await service.update_task(mock_db_session, "abc", dto)

        update.assert_awaited_once_with(mock_db_session, "abc", {"title": "new"})

    @pytest.mark.asyncio
    async def test_absent_task_propagates_none(self, mock_db_session):
        with patch(f"{REPO}.update", new=AsyncMock(return_value=None)):
            result = await service.update_task(mock_db_session, "abc", UpdateTaskDTO())

        assert result is None


class TestLookups:

    @pytest.mark.asyncio
    async def test_get_task_by_id_none_when_missing(self, mock_db_session):
        with patch(f"{REPO}.find_by_id", new=AsyncMock(return_value=None)):
            assert await service.get_task_by_id(mock_db_session, "nope") is None

    @pytest.mark.asyncio
    async def test_delete_task_false_when_missing(self, mock_db_session):
        with patch(f"{REPO}.delete_by_id", new=AsyncMock(return_value=False)):
            assert await service.delete_task(mock_db_session, "nope") is False

    @pytest.mark.asyncio
    async def test_get_tasks_by_status_delegates(self, mock_db_session):
        with patch(f"{REPO}.find_by_status", new=AsyncMock(return_value=[])) as find:
            assert await service.get_tasks_by_status(mock_db_session, True) == []

        find.assert_awaited_once_with(mock_db_session, True)


class TestStats:

    @pytest.mark.asyncio
    async def test_pending_is_total_minus_completed(self, mock_db_session):
        with patch(f"{REPO}.count_by_completion", new=AsyncMock(return_value=(7, 3))) as counts, \
             patch(f"{REPO}.count", new=AsyncMock()) as count:
            stats = await service.get_task_stats(mock_db_session)

        assert stats == TaskStats(total=7, completed=3, pending=4)
        counts.assert_awaited_once_with(mock_db_session)
        # Both numbers must come from the same statement
        count.assert_not_awaited()
