"""Pydantic schemas for Task API.

Wire keys are camelCase; request bodies also accept snake_case names.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from domain.entities.task import Task


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskCreate(CamelModel):
    """Schema for creating a Task.

    Length and date rules are enforced by the service so every violation
    produces the same 400 error body.
    """

    title: str | None = None
    notes: str | None = None
    due_date: str | None = None
    done: bool = False


class TaskUpdate(CamelModel):
    """Schema for a partial update. Omitted or null fields are left unchanged.

    ``dueDate: ""`` clears the due date.
    """

    title: str | None = None
    notes: str | None = None
    due_date: str | None = None
    done: bool | None = None


class TaskToggle(CamelModel):
    """Schema for setting the done flag."""

    done: bool


class TaskResponse(CamelModel):
    """Schema for Task response."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Write the quarterly report",
                "notes": "Include the Q3 numbers",
                "dueDate": "2026-11-01T17:00:00Z",
                "done": False,
                "createdAt": "2026-10-19T10:00:00Z",
                "updatedAt": "2026-10-19T10:00:00Z",
            }
        },
    )

    id: UUID
    title: str
    notes: str | None = None
    due_date: datetime | None = None
    done: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, task: Task) -> "TaskResponse":
        """Convert domain entity to response schema."""
        return cls(
            id=task.id,
            title=task.title,
            notes=task.notes,
            due_date=task.due_date,
            done=task.done,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )
