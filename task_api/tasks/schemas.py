from datetime import datetime, timezone
from typing import Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    HIGH = "high"
    MID = "mid"
    LOW = "low"


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateTaskRequest(CamelModel):
    title: str = Field(..., min_length=1)
    description: str | None = None
    priority: Priority = Priority.MID
    due_date_string: str | None = None
    due_date: datetime | None = None
    completed: bool = False

    @field_validator("due_date", mode="before")
    def blank_due_date_is_none(cls, value: Any):
        # Forms submit "" when the date input is left empty
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("due_date")
    def default_to_utc(cls, value: datetime | None):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Task(CamelModel):
    id: str
    title: str
    description: str | None = None
    priority: Priority = Priority.MID
    due_date_string: str | None = None
    due_date: datetime | None = None
    created_at: datetime
    updated_at: datetime
    completed: bool = False
    deleted: bool = False
    deleted_at: datetime | None = None


class TaskUpdate(BaseModel):
    """Partial update applied by the store.

    Only fields explicitly set are written, so ``TaskUpdate(deleted_at=None)``
    clears ``deleted_at`` while ``TaskUpdate(completed=True)`` leaves it alone.
    """

    completed: bool | None = None
    deleted: bool | None = None
    deleted_at: datetime | None = None


class TaskMessage(BaseModel):
    message: str


class TaskActionResponse(TaskMessage):
    task: Task
