"""Domain entity for free-text comments left on an unarchiving record."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from unarchiving.domain.clock import Clock, SystemClock, ensure_utc
from unarchiving.domain.exceptions import ValidationError

DEFAULT_AUTHOR_NAME = "Usuário"
AUTHOR_NAME_MAX_LENGTH = 255


@dataclass
class RecordComment:
    """A note written by a user on one record. Comments are append-only."""

    record_id: int
    author_name: str
    comment: str
    created_at: datetime
    author_id: int | None = None
    id: int | None = None

    @classmethod
    def create(
        cls,
        *,
        record_id: int,
        comment: str | None,
        author_id: int | None = None,
        author_name: str | None = None,
        clock: Clock | None = None,
    ) -> "RecordComment":
        """Validate and trim a new comment.

        Blank text is rejected. A missing author name falls back to a
        generic label so the comment always shows who wrote it.
        """
        text = comment.strip() if isinstance(comment, str) else ""
        if not text:
            raise ValidationError("comment", "must not be empty")
        name = (author_name or "").strip() or DEFAULT_AUTHOR_NAME
        if len(name) > AUTHOR_NAME_MAX_LENGTH:
            raise ValidationError(
                "author_name", f"must be at most {AUTHOR_NAME_MAX_LENGTH} characters"
            )
        return cls(
            record_id=record_id,
            author_id=author_id,
            author_name=name,
            comment=text,
            created_at=(clock or SystemClock()).now(),
        )

    def __post_init__(self) -> None:
        self.created_at = ensure_utc(self.created_at)

    def snapshot(self) -> dict[str, Any]:
        return {
            "comment_id": self.id,
            "author_id": self.author_id,
            "author_name": self.author_name,
            "comment": self.comment,
            "created_at": self.created_at.isoformat(),
        }
