"""Task repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.task import Task, TaskListQuery, TaskPage


class ITaskRepository(Protocol):
    """Repository interface for Task entities."""

    async def get(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        ...

    async def exists(self, id: UUID) -> bool:
        """Check whether a task with this ID is stored."""
        ...

    async def list_page(self, query: TaskListQuery) -> TaskPage:
        """Get one filtered, ordered page plus the pre-pagination total."""
        ...

    async def create(self, task: Task) -> Task:
        """Create a new task."""
        ...

    async def update(self, task: Task, expected_version: int) -> Task:
        """Persist ``task`` only if the stored version equals ``expected_version``.

        Raises ``WriteConflictError`` when no row matches.
        """
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a task and return success status."""
        ...
