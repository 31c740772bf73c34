"""
Modulith Backend — Task Schema Tests
=====================================

validate_create / validate_update never raise and report issues as
{code, path, message}; TaskResponse renders the public JSON shape.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from modulith.modules.tasks.schemas import TaskResponse, validate_create, validate_update


class TestValidateCreate:

    def test_valid_title_only(self):
        result = validate_create({"title": "Buy milk"})

        assert result.ok
        assert result.value.title == "Buy milk"
        assert result.value.completed is None
        assert result.issues == []

    def test_valid_with_completed(self):
        result = validate_create({"title": "Buy milk", "completed": True})

        assert result.value.completed is True

    def test_long_title_is_accepted(self):
        result = validate_create({"title": "x" * 10_000})

        assert result.ok
        assert len(result.value.title) == 10_000

    @pytest.mark.parametrize("data,code,path", [
        ({"title": ""}, "string_too_short", ["title"]),
        ({"title": 1}, "string_type", ["title"]),
        ({"title": "t", "completed": "true"}, "bool_type", ["completed"]),
        ({"title": "t", "completed": None}, "null_not_allowed", ["completed"]),
        ({"title": "t", "owner": "me"}, "extra_forbidden", ["owner"]),
        ({}, "missing", ["title"]),
        (None, "model_type", []),
        ("title", "model_type", []),
    ])
    def test_invalid_inputs(self, data, code, path):
        result = validate_create(data)

        assert not result.ok
        assert result.value is None
        assert result.issues[0]["code"] == code
        assert result.issues[0]["path"] == path
        assert result.issues[0]["message"]

    def test_reports_every_issue(self):
        result = validate_create({"title": "", "completed": 0})

        assert {issue["path"][0] for issue in result.issues} == {"title", "completed"}


class TestValidateUpdate:

    def test_empty_object_changes_nothing(self):
        result = validate_update({})

        assert result.ok
        assert result.value.changes() == {}

    def test_changes_contain_only_sent_fields(self):
        result = validate_update({"completed": False})

        assert result.value.changes() == {"completed": False}

    @pytest.mark.parametrize("data,code", [
        ({"title": None}, "null_not_allowed"),
        ({"completed": None}, "null_not_allowed"),
        ({"title": ""}, "string_too_short"),
        ({"completed": 1}, "bool_type"),
        ({"id": "abc"}, "extra_forbidden"),
        ([], "model_type"),
    ])
    def test_invalid_inputs(self, data, code):
        result = validate_update(data)

        assert not result.ok
        assert result.issues[0]["code"] == code


class TestTaskResponse:

    def test_serializes_created_at_as_camel_case(self):
        task = SimpleNamespace(
            id="abc",
            title="t",
            completed=False,
            created_at=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        )

        body = TaskResponse.model_validate(task).model_dump(mode="json", by_alias=True)

        assert body == {
            "id": "abc",
            "title": "t",
            "completed": False,
            "createdAt": "2024-01-15T12:00:00Z",
        }

    def test_naive_timestamps_are_treated_as_utc(self):
        task = SimpleNamespace(id="abc", title="t", completed=True, created_at=datetime(2024, 1, 15))

        response = TaskResponse.model_validate(task)

        assert response.created_at.tzinfo == timezone.utc
