"""SQLAlchemy ORM model for audit log entries."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from unarchiving.infrastructure.database.base import Base


class AuditLogModel(Base):
    """ORM model mapped to the 'audit_logs' table.

    ``record_id`` is not a foreign key: entries must outlive a permanently
    deleted record.
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    actor_id: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    record_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    before: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    after: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_audit_logs_record", "record_id"),
        Index("ix_audit_logs_actor", "actor_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLogModel(id={self.id}, action='{self.action}', "
            f"record_id={self.record_id})>"
        )
