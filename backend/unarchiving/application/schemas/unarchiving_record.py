"""Pydantic DTOs (Data Transfer Objects) for the unarchiving record feature."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from unarchiving.domain.entities import (
    DEFAULT_DEADLINE_DAYS,
    RecordPage,
    RecordStatus,
    RecordType,
    UnarchivingRecord,
)


class RecordCreate(BaseModel):
    """Schema for opening a new unarchiving request."""

    record_type: RecordType = Field(..., examples=["FISICO"])
    full_name: str = Field(..., min_length=1, max_length=255, examples=["Maria da Silva"])
    reference_code: str = Field(..., min_length=1, max_length=100, examples=["NIC-2024-000123"])
    process_number: str = Field(..., min_length=1, max_length=255, examples=["0001234-56.2024.8.06.0001"])
    document_type: str = Field(..., min_length=1, max_length=100, examples=["Laudo"])
    requesting_department: str = Field(..., min_length=1, max_length=255)
    responsible_staff: str = Field(..., min_length=1, max_length=255)
    purpose: str = Field(..., min_length=1, max_length=1000)
    request_date: datetime
    return_date: datetime | None = None
    extension_requested: bool = False
    urgent: bool = False


class RecordUpdate(BaseModel):
    """Schema for updating an existing record. All fields are optional.

    ``reference_code`` is immutable once issued and therefore absent.
    """

    record_type: RecordType | None = None
    full_name: str | None = Field(None, min_length=1, max_length=255)
    process_number: str | None = Field(None, min_length=1, max_length=255)
    document_type: str | None = Field(None, min_length=1, max_length=100)
    requesting_department: str | None = Field(None, min_length=1, max_length=255)
    responsible_staff: str | None = Field(None, min_length=1, max_length=255)
    purpose: str | None = Field(None, min_length=1, max_length=1000)
    extension_requested: bool | None = None
    urgent: bool | None = None
    assigned_to_id: int | None = Field(None, gt=0)
    release_date: datetime | None = None
    return_date: datetime | None = None
    status: RecordStatus | None = None


class RecordListQuery(BaseModel):
    """Listing parameters: pagination, sorting and filters."""

    page: int = Field(1, ge=1)
    limit: int | None = Field(None, ge=1)
    sort_by: str = "created_at"
    sort_order: Literal["ASC", "DESC"] = "DESC"
    search: str | None = Field(None, max_length=255)
    statuses: list[RecordStatus] = Field(default_factory=list)
    record_types: list[RecordType] = Field(default_factory=list)
    created_by_id: int | None = Field(None, gt=0)
    assigned_to_id: int | None = Field(None, gt=0)
    urgent: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    include_deleted: bool = False


class RecordResponse(BaseModel):
    """Schema returned to the client."""

    id: int
    record_type: RecordType
    status: RecordStatus
    full_name: str
    reference_code: str
    process_number: str
    document_type: str
    requesting_department: str
    responsible_staff: str
    purpose: str
    request_date: datetime
    release_date: datetime | None
    return_date: datetime | None
    extension_requested: bool
    urgent: bool
    created_by_id: int
    assigned_to_id: int | None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None
    is_overdue: bool
    days_until_deadline: int | None

    model_config = {"from_attributes": True}

    @classmethod
    def from_record(
        cls, record: UnarchivingRecord, deadline_days: int = DEFAULT_DEADLINE_DAYS
    ) -> "RecordResponse":
        return cls.model_validate(record.snapshot(deadline_days))


class RecordPageResponse(BaseModel):
    items: list[RecordResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(
        cls, page: RecordPage, deadline_days: int = DEFAULT_DEADLINE_DAYS
    ) -> "RecordPageResponse":
        return cls(
            items=[RecordResponse.from_record(r, deadline_days) for r in page.items],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )


class AssigneeStatsResponse(BaseModel):
    total: int
    completed: int
    average_days: float

    model_config = {"from_attributes": True}


class DashboardStatsResponse(BaseModel):
    """Aggregated dashboard counters. Percentages are 0–100, durations in days."""

    total: int
    pending: int
    in_progress: int
    completed: int
    not_located: int
    overdue: int
    urgent: int
    due_soon: int
    by_type: dict[str, int]
    by_month: dict[str, int]
    completion_rate: float
    average_handling_days: float
    per_assignee: dict[int, AssigneeStatsResponse] | None = None

    model_config = {"from_attributes": True}


class DeletionResult(BaseModel):
    """Outcome of a delete request."""

    record_id: int
    permanent: bool = False
    already_deleted: bool = False
    message: str


class CommentCreate(BaseModel):
    """Schema for adding a comment to a record. Blank text is rejected by the domain."""

    comment: str = Field(..., examples=["Documento enviado ao setor solicitante"])


class CommentResponse(BaseModel):
    """Schema for returning a record comment."""

    id: int
    record_id: int
    author_id: int | None = None
    author_name: str
    comment: str
    created_at: datetime

    model_config = {"from_attributes": True}
