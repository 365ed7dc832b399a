"""SQLAlchemy implementation of Task repository."""

from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import Select, case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from core.exceptions import WriteConflictError
from domain.entities.task import (
    SortOrder,
    Task,
    TaskListQuery,
    TaskPage,
    TaskSortField,
    TaskStatusFilter,
)
from infrastructure.database.models import TaskModel


class SQLAlchemyTaskRepository:
    """SQLAlchemy implementation of ITaskRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        stmt = (
            select(TaskModel)
            .where(TaskModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def exists(self, id: UUID) -> bool:
        """Check whether a task with this ID is stored."""
        stmt = select(TaskModel.id).where(TaskModel.id == id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def list_page(self, query: TaskListQuery) -> TaskPage:
        """Get one filtered, ordered page plus the pre-pagination total."""
        conditions = self._status_conditions(query.status)

        count_stmt = select(func.count()).select_from(TaskModel).where(*conditions)
        total = (await self._session.execute(count_stmt)).scalar_one()

        stmt: Select[tuple[TaskModel]] = (
            select(TaskModel)
            .where(*conditions)
            .order_by(*self._ordering(query.sort, query.order))
            .offset(query.offset)
            .limit(query.page_size)
        )
        result = await self._session.execute(stmt)
        return TaskPage(
            items=[self._to_entity(model) for model in result.scalars()],
            total=total,
        )

    async def create(self, task: Task) -> Task:
        """Create a new task."""
        model = self._to_model(task)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, task: Task, expected_version: int) -> Task:
        """Write all mutable fields if the stored version still matches."""
        next_version = expected_version + 1
        stmt = (
            update(TaskModel)
            .where(TaskModel.id == task.id, TaskModel.version == expected_version)
            .values(
                title=task.title,
                notes=task.notes,
                due_date=task.due_date,
                done=task.done,
                updated_at=task.updated_at,
                version=next_version,
            )
        )
        result = await self._session.execute(stmt)

        if result.rowcount != 1:  # type: ignore[attr-defined]
            raise WriteConflictError(str(task.id), expected_version)

        return replace(task, version=next_version)

    async def delete(self, id: UUID) -> bool:
        """Delete a task; False when no row matched."""
        stmt = delete(TaskModel).where(TaskModel.id == id)
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    @staticmethod
    def _status_conditions(status: TaskStatusFilter) -> list[ColumnElement[bool]]:
        if status is TaskStatusFilter.ACTIVE:
            return [TaskModel.done.is_(False)]
        if status is TaskStatusFilter.COMPLETED:
            return [TaskModel.done.is_(True)]
        return []

    @staticmethod
    def _ordering(sort: TaskSortField, order: SortOrder) -> list[ColumnElement[object]]:
        """Incomplete tasks first, then the requested key, then id for stable pages."""
        ascending = order is SortOrder.ASC
        clauses: list[ColumnElement[object]] = [TaskModel.done.asc()]

        if sort is TaskSortField.CREATED_AT:
            clauses.append(
                TaskModel.created_at.asc() if ascending else TaskModel.created_at.desc()
            )
        else:
            # Tasks without a due date go last in both directions.
            clauses.append(case((TaskModel.due_date.is_(None), 1), else_=0).asc())
            clauses.append(TaskModel.due_date.asc() if ascending else TaskModel.due_date.desc())
            clauses.append(TaskModel.created_at.desc())

        clauses.append(TaskModel.id.asc())
        return clauses

    @staticmethod
    def _as_utc(value: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes; everything is stored in UTC.
        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=timezone.utc)

    def _to_entity(self, model: TaskModel) -> Task:
        """Convert ORM model to domain entity."""
        return Task(
            id=model.id,
            title=model.title,
            notes=model.notes,
            due_date=self._as_utc(model.due_date),
            done=model.done,
            created_at=self._as_utc(model.created_at),  # type: ignore[arg-type]
            updated_at=self._as_utc(model.updated_at),  # type: ignore[arg-type]
            version=model.version,
        )

    def _to_model(self, entity: Task) -> TaskModel:
        """Convert domain entity to ORM model."""
        return TaskModel(
            id=entity.id,
            title=entity.title,
            notes=entity.notes,
            due_date=entity.due_date,
            done=entity.done,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            version=entity.version,
        )
