"""Dashboard aggregation over a set of loaded records.

Kept as a pure function so every repository implementation produces the
same numbers for the same rows, whatever its storage engine.
"""

from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import datetime

from unarchiving.domain.entities import (
    DEFAULT_DEADLINE_DAYS,
    AssigneeStats,
    DashboardStats,
    RecordStatus,
    UnarchivingRecord,
)

DEFAULT_DUE_SOON_DAYS = 7

_SECONDS_PER_DAY = 24 * 60 * 60


def summarize_records(
    records: Iterable[UnarchivingRecord],
    *,
    deadline_days: int = DEFAULT_DEADLINE_DAYS,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    include_assignees: bool = False,
) -> DashboardStats:
    """Aggregate counters for the dashboard.

    ``completion_rate`` is a percentage; average durations are in days. Both
    are rounded to two decimals. ``per_assignee`` is only filled when
    ``include_assignees`` is set and is keyed by assignee user id.
    """
    stats = DashboardStats()
    by_type: Counter[str] = Counter()
    by_month: Counter[str] = Counter()
    handling_seconds: list[float] = []
    assignees: dict[int, list[UnarchivingRecord]] = defaultdict(list)

    for record in records:
        status = record.status
        stats.total += 1
        if status.is_pending():
            stats.pending += 1
        if status.is_in_progress():
            stats.in_progress += 1
        if status is RecordStatus.FINALIZADO:
            stats.completed += 1
            if record.release_date is not None:
                handling_seconds.append(_seconds_between(record.request_date, record.release_date))
        if status is RecordStatus.NAO_LOCALIZADO:
            stats.not_located += 1
        if record.urgent:
            stats.urgent += 1
        if record.is_overdue(deadline_days):
            stats.overdue += 1
        remaining = record.days_until_deadline(deadline_days)
        if remaining is not None and 0 <= remaining <= due_soon_days:
            stats.due_soon += 1

        by_type[record.record_type.value] += 1
        by_month[record.created_at.strftime("%Y-%m")] += 1
        if include_assignees and record.assigned_to_id is not None:
            assignees[record.assigned_to_id].append(record)

    stats.by_type = dict(by_type)
    stats.by_month = dict(sorted(by_month.items()))
    if stats.total:
        stats.completion_rate = round(stats.completed / stats.total * 100, 2)
    stats.average_handling_days = _average_days(handling_seconds)
    if include_assignees:
        stats.per_assignee = {
            user_id: _assignee_stats(assigned)
            for user_id, assigned in sorted(assignees.items())
        }
    return stats


def _assignee_stats(records: list[UnarchivingRecord]) -> AssigneeStats:
    completed = [r for r in records if r.status is RecordStatus.FINALIZADO]
    durations = [
        _seconds_between(r.created_at, r.release_date)
        for r in completed
        if r.release_date is not None
    ]
    return AssigneeStats(
        total=len(records),
        completed=len(completed),
        average_days=_average_days(durations),
    )


def _seconds_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds()


def _average_days(seconds: list[float]) -> float:
    if not seconds:
        return 0.0
    return round(sum(seconds) / len(seconds) / _SECONDS_PER_DAY, 2)
