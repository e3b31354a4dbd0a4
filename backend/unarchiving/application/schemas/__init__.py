from .unarchiving_record import (
    AssigneeStatsResponse,
    CommentCreate,
    CommentResponse,
    DashboardStatsResponse,
    DeletionResult,
    RecordCreate,
    RecordListQuery,
    RecordPageResponse,
    RecordResponse,
    RecordUpdate,
)

__all__ = [
    "AssigneeStatsResponse",
    "CommentCreate",
    "CommentResponse",
    "DashboardStatsResponse",
    "DeletionResult",
    "RecordCreate",
    "RecordListQuery",
    "RecordPageResponse",
    "RecordResponse",
    "RecordUpdate",
]
