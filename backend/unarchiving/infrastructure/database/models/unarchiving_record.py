"""SQLAlchemy ORM model for the UnarchivingRecord entity."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from unarchiving.infrastructure.database.base import Base

REFERENCE_CODE_CONSTRAINT = "uq_unarchiving_records_reference_code"


class UnarchivingRecordModel(Base):
    """ORM model mapped to the 'unarchiving_records' table.

    ``status`` and ``record_type`` are stored as plain strings so that a
    legacy or hand-edited token survives the read and can be reported by
    the mapper instead of breaking the driver.
    """

    __tablename__ = "unarchiving_records"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    record_type: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="SOLICITADO")
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    reference_code: Mapped[str] = mapped_column(String(100), nullable=False)
    process_number: Mapped[str | None] = mapped_column(String(255), nullable=True)
    document_type: Mapped[str] = mapped_column(String(100), nullable=False)
    requesting_department: Mapped[str] = mapped_column(String(255), nullable=False)
    responsible_staff: Mapped[str] = mapped_column(String(255), nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    request_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    release_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    return_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    extension_requested: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    urgent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_by_id: Mapped[int] = mapped_column(Integer, nullable=False)
    assigned_to_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("reference_code", name=REFERENCE_CODE_CONSTRAINT),
        Index("ix_unarchiving_records_status", "status"),
        Index("ix_unarchiving_records_record_type", "record_type"),
        Index("ix_unarchiving_records_request_date", "request_date"),
        Index("ix_unarchiving_records_created_by", "created_by_id"),
        Index("ix_unarchiving_records_assigned_to", "assigned_to_id"),
        Index("ix_unarchiving_records_deleted_at", "deleted_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<UnarchivingRecordModel(id={self.id}, "
            f"reference='{self.reference_code}', status='{self.status}')>"
        )
