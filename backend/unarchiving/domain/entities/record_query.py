"""Domain value types for listing, filtering and aggregating unarchiving records."""

import math
from dataclasses import dataclass, field
from datetime import datetime

from unarchiving.domain.clock import ensure_utc
from unarchiving.domain.entities.record_status import RecordStatus
from unarchiving.domain.entities.unarchiving_record import RecordType, UnarchivingRecord
from unarchiving.domain.exceptions import ValidationError

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SORTABLE_FIELDS = frozenset({
    "id",
    "created_at",
    "updated_at",
    "request_date",
    "release_date",
    "status",
    "record_type",
    "full_name",
    "reference_code",
    "process_number",
    "urgent",
})


@dataclass(frozen=True)
class Pagination:
    """1-indexed page request with a bounded page size."""

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    max_limit: int = field(default=MAX_PAGE_SIZE, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("page", "must be 1 or greater")
        if not 1 <= self.limit <= self.max_limit:
            raise ValidationError("limit", f"must be between 1 and {self.max_limit}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SortSpec:
    """Sort order restricted to known record attributes."""

    field: str = "created_at"
    descending: bool = True

    def __post_init__(self) -> None:
        if self.field not in SORTABLE_FIELDS:
            raise ValidationError("sort", f"cannot sort by {self.field!r}")


@dataclass(frozen=True)
class DateRange:
    """Inclusive window of UTC instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.start > self.end:
            raise ValidationError("date_range", "start must not be after end")

    @property
    def days(self) -> float:
        return (self.end - self.start).total_seconds() / 86400

    def contains(self, instant: datetime) -> bool:
        return self.start <= ensure_utc(instant) <= self.end


@dataclass(frozen=True)
class RecordFilters:
    """Filters accepted by the repository listing.

    Soft-deleted rows are invisible unless ``include_deleted`` (both live
    and deleted) or ``only_deleted`` (the trash view) is set.
    ``visible_to_user_id`` limits results to rows the user created or is
    assigned to.
    """

    search: str | None = None
    statuses: frozenset[RecordStatus] = frozenset()
    record_types: frozenset[RecordType] = frozenset()
    created_by_id: int | None = None
    assigned_to_id: int | None = None
    visible_to_user_id: int | None = None
    urgent: bool | None = None
    created_between: DateRange | None = None
    include_deleted: bool = False
    only_deleted: bool = False

    def matches(self, record: UnarchivingRecord) -> bool:
        """Evaluate the filters in memory; mirrors the SQL the repository emits."""
        if self.only_deleted:
            if not record.is_deleted():
                return False
        elif record.is_deleted() and not self.include_deleted:
            return False
        if self.statuses and record.status not in self.statuses:
            return False
        if self.record_types and record.record_type not in self.record_types:
            return False
        if self.created_by_id is not None and record.created_by_id != self.created_by_id:
            return False
        if self.assigned_to_id is not None and record.assigned_to_id != self.assigned_to_id:
            return False
        if self.visible_to_user_id is not None and self.visible_to_user_id not in (
            record.created_by_id,
            record.assigned_to_id,
        ):
            return False
        if self.urgent is not None and record.urgent != self.urgent:
            return False
        if self.created_between is not None and not self.created_between.contains(record.created_at):
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystacks = (record.full_name, record.reference_code, record.process_number)
            if not any(needle in value.lower() for value in haystacks):
                return False
        return True


@dataclass
class RecordPage:
    """One page of records plus the total number of matching rows."""

    items: list[UnarchivingRecord]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


@dataclass
class AssigneeStats:
    """Throughput of one staff member across their assigned records."""

    total: int = 0
    completed: int = 0
    average_days: float = 0.0


@dataclass
class DashboardStats:
    """Aggregated counters for the dashboard read model."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    not_located: int = 0
    overdue: int = 0
    urgent: int = 0
    due_soon: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_month: dict[str, int] = field(default_factory=dict)
    completion_rate: float = 0.0
    average_handling_days: float = 0.0
    per_assignee: dict[int, AssigneeStats] | None = None
