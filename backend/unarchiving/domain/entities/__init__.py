from .record_status import RecordStatus
from .role import Actor, Role
from .unarchiving_record import (
    DEFAULT_DEADLINE_DAYS,
    TEXT_FIELD_LIMITS,
    RecordType,
    UnarchivingRecord,
)
from .record_query import (
    AssigneeStats,
    DashboardStats,
    DateRange,
    Pagination,
    RecordFilters,
    RecordPage,
    SortSpec,
)
from .audit_entry import AuditAction, AuditEntry
from .record_comment import RecordComment

__all__ = [
    "RecordStatus",
    "Actor",
    "Role",
    "DEFAULT_DEADLINE_DAYS",
    "TEXT_FIELD_LIMITS",
    "RecordType",
    "UnarchivingRecord",
    "AssigneeStats",
    "DashboardStats",
    "DateRange",
    "Pagination",
    "RecordFilters",
    "RecordPage",
    "SortSpec",
    "AuditAction",
    "AuditEntry",
    "RecordComment",
]
