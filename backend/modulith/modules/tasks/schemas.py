"""
Modulith Backend — Task Schemas and Validation
===============================================

What:  Pydantic models for the tasks API contract, plus the two validation
       entry points used by the controller.
How:   DTOs are strict (no coercion: "true" is not a bool, 1 is not a
       string) and reject unknown fields. `validate_create` and
       `validate_update` never raise; they return a ValidationResult holding
       either the DTO or a list of issues.

Issue shape (returned to the client as {"error": [issues]}):
    {"code": "string_too_short", "path": ["title"], "message": "..."}

    path lists the keys/indexes that locate the offending field; an empty
    path means the body itself (not an object, missing, malformed JSON).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

Issue = Dict[str, Any]
T = TypeVar("T", bound=BaseModel)


def _reject_null(value: Any) -> Any:
    if value is None:
        raise PydanticCustomError("null_not_allowed", "Field may not be null")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request DTOs: what clients may send
# ══════════════════════════════════════════════════════════════════════════


class CreateTaskDTO(BaseModel):
    """Body of POST /tasks."""

    model_config = ConfigDict(strict=True, extra="forbid")

    title: str = Field(min_length=1, description="Task title (non-empty, no length cap)")
    completed: Optional[bool] = Field(
        default=None,
        description="Completion flag; the service stores false when omitted",
    )

    # Omitting `completed` is fine, sending null is not
    @field_validator("completed", mode="before")
    @classmethod
    def completed_not_null(cls, v: Any) -> Any:
        return _reject_null(v)


class UpdateTaskDTO(BaseModel):
    """
    Body of PATCH /tasks/{id}.

    Every field is optional but none may be null. Only the fields present
    in the request are applied (see `changes()`), so `{}` is a valid no-op.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1)
    completed: Optional[bool] = None

    @field_validator("title", "completed", mode="before")
    @classmethod
    def fields_not_null(cls, v: Any) -> Any:
        return _reject_null(v)

    def changes(self) -> Dict[str, Any]:
        """Fields the client actually sent, ready to apply to the entity."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what the API returns
# ══════════════════════════════════════════════════════════════════════════


class TaskResponse(BaseModel):
    """JSON shape of a Task: {id, title, completed, createdAt}."""

    id: str = Field(description="Opaque task identifier")
    title: str
    completed: bool
    created_at: datetime = Field(alias="createdAt", description="Creation time (ISO 8601, UTC)")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        # SQLite hands timestamps back without an offset; they were written as UTC
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)


class TaskStats(BaseModel):
    """Aggregate counts; pending is always total - completed."""

    total: int
    completed: int
    pending: int


class ErrorResponse(BaseModel):
    """
    Error body for 400/404 responses.

    `error` is a message string for 404 and a list of issues for 400.
    """

    error: Any = Field(description="Error message or list of validation issues")


# ══════════════════════════════════════════════════════════════════════════
# Validation entry points
# ══════════════════════════════════════════════════════════════════════════


@dataclass
class ValidationResult(Generic[T]):
    """Either `value` (success) or `issues` (failure), never both."""

    value: Optional[T] = None
    issues: List[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.value is not None


def to_issues(exc: ValidationError) -> List[Issue]:
    """Flatten a pydantic ValidationError into JSON-safe issue dicts."""
    return [
        {"code": err["type"], "path": list(err["loc"]), "message": err["msg"]}
        for err in exc.errors()
    ]


def _validate(model: type[T], data: Any) -> ValidationResult[T]:
    try:
        return ValidationResult(value=model.model_validate(data))
    except ValidationError as exc:
        return ValidationResult(issues=to_issues(exc))


def validate_create(data: Any) -> ValidationResult[CreateTaskDTO]:
    return _validate(CreateTaskDTO, data)


def validate_update(data: Any) -> ValidationResult[UpdateTaskDTO]:
    return _validate(UpdateTaskDTO, data)
