"""Task service layer with business logic."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from uuid import UUID

import structlog

from core.exceptions import TaskNotFoundError, ValidationError, WriteConflictError
from domain.entities.task import (
    NOTES_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
    Task,
    TaskListQuery,
    TaskPage,
    utc_now,
)
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

TITLE_TOO_SHORT = f"Title must be longer than {TITLE_MIN_LENGTH - 1} characters."
TITLE_TOO_LONG = f"Title must be {TITLE_MAX_LENGTH} characters or less."
NOTES_TOO_LONG = f"Notes must be {NOTES_MAX_LENGTH} characters or less."
INVALID_DUE_DATE = "Invalid due date format. Use ISO 8601 format."


def validate_title(title: str | None) -> str:
    """Return the trimmed title or raise ValidationError."""
    trimmed = (title or "").strip()
    if len(trimmed) < TITLE_MIN_LENGTH:
        raise ValidationError(TITLE_TOO_SHORT, field="title")
    if len(trimmed) > TITLE_MAX_LENGTH:
        raise ValidationError(TITLE_TOO_LONG, field="title")
    return trimmed


def validate_notes(notes: str | None) -> str | None:
    if notes is not None and len(notes) > NOTES_MAX_LENGTH:
        raise ValidationError(NOTES_TOO_LONG, field="notes")
    return notes


def parse_due_date(value: str | None) -> datetime | None:
    """Parse an ISO 8601 due date; empty input means no due date.

    Values without an offset are taken as UTC. The result is normalized to
    UTC so the stored instant round-trips exactly.
    """
    if not value or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 push the UTC instant out of range.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise ValidationError(INVALID_DUE_DATE, field="dueDate") from None


def _touch(previous: datetime) -> datetime:
    # Strictly after the previous stamp even on coarse clocks.
    return max(utc_now(), previous + timedelta(microseconds=1))


class TaskService:
    """Service layer for Task business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def list_tasks(
        self,
        status: str | None = None,
        sort: str | None = None,
        order: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> TaskPage:
        """List tasks with lenient filter/sort parameters.

        Unknown values fall back to defaults (see ``TaskListQuery.from_params``).
        """
        try:
            query = TaskListQuery.from_params(
                status=status, sort=sort, order=order, page=page, page_size=page_size
            )
        except ValueError as e:
            raise ValidationError(str(e)) from None

        async with self._uow_factory() as uow:
            return await uow.tasks.list_page(query)  # type: ignore[no-any-return]

    async def get_by_id(self, task_id: UUID) -> Task:
        """Get a specific task."""
        async with self._uow_factory() as uow:
            task = await uow.tasks.get(task_id)
            if not task:
                raise TaskNotFoundError(str(task_id))
            return task

    async def create(
        self,
        title: str | None,
        notes: str | None = None,
        due_date: str | None = None,
        done: bool = False,
    ) -> Task:
        """Validate input and create a new task."""
        clean_title = validate_title(title)
        clean_notes = validate_notes(notes)
        parsed_due = parse_due_date(due_date)

        now = utc_now()
        task = Task(
            title=clean_title,
            notes=clean_notes,
            due_date=parsed_due,
            done=done,
            created_at=now,
            updated_at=now,
        )

        async with self._uow_factory() as uow:
            created = await uow.tasks.create(task)
            await uow.commit()

        logger.info("task_created", task_id=str(created.id))
        return created  # type: ignore[no-any-return]

    async def update(
        self,
        task_id: UUID,
        title: str | None = None,
        notes: str | None = None,
        due_date: str | None = None,
        done: bool | None = None,
    ) -> Task:
        """Apply a partial update.

        ``None`` means the field was not sent. An empty ``due_date`` clears
        the due date. ``updated_at`` is refreshed even when no value differs.
        """
        async with self._uow_factory() as uow:
            current = await uow.tasks.get(task_id)
            if not current:
                raise TaskNotFoundError(str(task_id))

            changes: dict[str, object] = {}
            if title is not None:
                changes["title"] = validate_title(title)
            if notes is not None:
                changes["notes"] = validate_notes(notes)
            if due_date is not None:
                changes["due_date"] = parse_due_date(due_date)
            if done is not None and done != current.done:
                changes["done"] = done

            updated = replace(current, updated_at=_touch(current.updated_at), **changes)
            saved = await self._save(uow, updated, current.version)

        logger.info("task_updated", task_id=str(task_id), fields=sorted(changes))
        return saved

    async def toggle(self, task_id: UUID, done: bool) -> Task:
        """Set the done flag unconditionally and refresh ``updated_at``."""
        async with self._uow_factory() as uow:
            current = await uow.tasks.get(task_id)
            if not current:
                raise TaskNotFoundError(str(task_id))

            updated = replace(current, done=done, updated_at=_touch(current.updated_at))
            saved = await self._save(uow, updated, current.version)

        logger.info("task_toggled", task_id=str(task_id), done=done)
        return saved

    async def delete(self, task_id: UUID) -> None:
        """Delete a task."""
        async with self._uow_factory() as uow:
            deleted = await uow.tasks.delete(task_id)
            if not deleted:
                raise TaskNotFoundError(str(task_id))
            await uow.commit()

        logger.info("task_deleted", task_id=str(task_id))

    async def _save(self, uow: IUnitOfWork, task: Task, expected_version: int) -> Task:
        """Conditional write; a conflict on a deleted row becomes NotFound."""
        try:
            saved = await uow.tasks.update(task, expected_version)
        except WriteConflictError:
            await uow.rollback()
            if not await uow.tasks.exists(task.id):
                raise TaskNotFoundError(str(task.id)) from None
            logger.error(
                "task_write_conflict",
                task_id=str(task.id),
                expected_version=expected_version,
            )
            raise
        await uow.commit()
        return saved  # type: ignore[no-any-return]
