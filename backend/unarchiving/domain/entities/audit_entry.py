"""Domain entity for audit trail entries of state-changing operations."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """Operations that produce an audit entry."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    ASSIGN = "ASSIGN"
    CHANGE_STATUS = "CHANGE_STATUS"
    OVERRIDE_STATUS = "OVERRIDE_STATUS"
    COMPLETE = "COMPLETE"
    SOFT_DELETE = "SOFT_DELETE"
    HARD_DELETE = "HARD_DELETE"
    RESTORE = "RESTORE"
    COMMENT = "COMMENT"


@dataclass
class AuditEntry:
    """Who did what to which record, with the record state before and after."""

    actor_id: int
    action: AuditAction
    record_id: int | None
    before: dict[str, Any] | None = None
    after: dict[str, Any] | None = None
    id: int | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
