"""Task domain entity and listing query types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from uuid import UUID, uuid4

TITLE_MIN_LENGTH = 11
TITLE_MAX_LENGTH = 256
NOTES_MAX_LENGTH = 1000
# Upper bound for page and page size; their product stays within a signed
# 64-bit OFFSET on SQLite and PostgreSQL.
PAGING_MAX = 2_147_483_647


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Task:
    """Domain entity for a Task.

    Instances are immutable; a changed task is a new value built with
    ``dataclasses.replace``. ``version`` is the optimistic-concurrency
    counter checked by the repository on every update.
    """

    title: str
    id: UUID = field(default_factory=uuid4)
    notes: str | None = None
    due_date: datetime | None = None
    done: bool = False
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    version: int = 1

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            object.__setattr__(self, "updated_at", self.created_at)


class TaskStatusFilter(StrEnum):
    """Which tasks a listing includes."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: str | None) -> "TaskStatusFilter":
        """Case-insensitive lookup; unknown values select every task."""
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.ALL


class TaskSortField(StrEnum):
    """Secondary ordering key (completion state always sorts first)."""

    DUE_DATE = "dueDate"
    CREATED_AT = "createdAt"

    @classmethod
    def parse(cls, value: str | None) -> "TaskSortField | None":
        """Case-insensitive lookup; returns None for unknown values."""
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


class SortOrder(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: str | None) -> "SortOrder":
        """Only ``asc`` (any case) is ascending; everything else is descending."""
        if (value or "").strip().lower() == cls.ASC.value:
            return cls.ASC
        return cls.DESC


@dataclass(frozen=True)
class TaskListQuery:
    """Resolved listing parameters."""

    status: TaskStatusFilter = TaskStatusFilter.ALL
    sort: TaskSortField = TaskSortField.DUE_DATE
    order: SortOrder = SortOrder.ASC
    page: int = 1
    page_size: int = 50

    @classmethod
    def from_params(
        cls,
        status: str | None = None,
        sort: str | None = None,
        order: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> "TaskListQuery":
        """Build a query from raw request strings.

        Unknown ``status`` means all tasks. Unknown ``sort`` means due date
        ascending regardless of ``order``.
        """
        sort_field = TaskSortField.parse(sort)
        if sort_field is None:
            sort_field, sort_order = TaskSortField.DUE_DATE, SortOrder.ASC
        else:
            sort_order = SortOrder.parse(order)

        if not 1 <= page <= PAGING_MAX:
            raise ValueError(f"page must be between 1 and {PAGING_MAX}")
        if not 1 <= page_size <= PAGING_MAX:
            raise ValueError(f"page_size must be between 1 and {PAGING_MAX}")

        return cls(
            status=TaskStatusFilter.parse(status),
            sort=sort_field,
            order=sort_order,
            page=page,
            page_size=page_size,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


@dataclass(frozen=True)
class TaskPage:
    """One page of tasks plus the total number matching the filter."""

    items: list[Task]
    total: int
