"""SQLAlchemy ORM model for comments attached to unarchiving records."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from unarchiving.infrastructure.database.base import Base


class RecordCommentModel(Base):
    """ORM model mapped to the 'record_comments' table."""

    __tablename__ = "record_comments"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    record_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("unarchiving_records.id", ondelete="CASCADE"),
        nullable=False,
    )
    author_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    author_name: Mapped[str] = mapped_column(String(255), nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_record_comments_record", "record_id"),
        Index("ix_record_comments_author", "author_id"),
    )

    def __repr__(self) -> str:
        return f"<RecordCommentModel(id={self.id}, record_id={self.record_id})>"
