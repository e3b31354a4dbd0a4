"""Domain entity: the unarchiving request aggregate and its lifecycle operations."""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from unarchiving.domain.clock import Clock, SystemClock, ensure_utc
from unarchiving.domain.entities.record_status import RecordStatus
from unarchiving.domain.exceptions import (
    IllegalTransitionError,
    InvalidStateError,
    InvalidStatusError,
    ReconstructionError,
    ValidationError,
)

DEFAULT_DEADLINE_DAYS = 30

# Attribute name → maximum length for the required descriptive fields.
TEXT_FIELD_LIMITS: dict[str, int] = {
    "full_name": 255,
    "reference_code": 100,
    "process_number": 255,
    "document_type": 100,
    "requesting_department": 255,
    "responsible_staff": 255,
    "purpose": 1000,
}


class RecordType(str, Enum):
    """How the requested record is held by the archive."""

    PHYSICAL = "FISICO"
    DIGITAL = "DIGITAL"
    NOT_LOCATED = "NAO_LOCALIZADO"

    @classmethod
    def parse(cls, raw: "str | RecordType | None") -> "RecordType":
        """Accept either the stored token (``FISICO``) or the member name (``PHYSICAL``)."""
        if isinstance(raw, RecordType):
            return raw
        token = raw.strip().upper() if isinstance(raw, str) else ""
        for member in cls:
            if token in (member.value, member.name):
                return member
        raise ValidationError("record_type", f"unknown record type {raw!r}")


@dataclass
class UnarchivingRecord:
    """One request to retrieve a record from the archive.

    The aggregate is mutated only through its lifecycle operations. Each
    operation validates first and then commits through ``_commit``, so a
    failed call leaves the instance exactly as it was.
    """

    record_type: RecordType
    full_name: str
    reference_code: str
    process_number: str
    document_type: str
    requesting_department: str
    responsible_staff: str
    purpose: str
    request_date: datetime
    created_by_id: int
    status: RecordStatus = RecordStatus.SOLICITADO
    release_date: datetime | None = None
    return_date: datetime | None = None
    extension_requested: bool = False
    urgent: bool = False
    assigned_to_id: int | None = None
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    clock: Clock = field(default_factory=SystemClock, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.status = RecordStatus.parse(self.status)
        self.record_type = RecordType.parse(self.record_type)
        self.extension_requested = bool(self.extension_requested)
        self.urgent = bool(self.urgent)

        if not isinstance(self.request_date, datetime):
            raise ValidationError("request_date", "is required")
        self.request_date = ensure_utc(self.request_date)
        self.release_date = _optional_utc("release_date", self.release_date)
        self.return_date = _optional_utc("return_date", self.return_date)
        self.deleted_at = _optional_utc("deleted_at", self.deleted_at)
        self.created_at = _optional_utc("created_at", self.created_at) or self.clock.now()
        self.updated_at = _optional_utc("updated_at", self.updated_at) or self.created_at

        self._validate()

    # ── Factories ────────────────────────────────────────────────────

    @classmethod
    def create(
        cls,
        *,
        record_type: RecordType | str,
        full_name: str,
        reference_code: str,
        process_number: str,
        document_type: str,
        requesting_department: str,
        responsible_staff: str,
        purpose: str,
        request_date: datetime,
        created_by_id: int,
        release_date: datetime | None = None,
        return_date: datetime | None = None,
        extension_requested: bool = False,
        urgent: bool = False,
        assigned_to_id: int | None = None,
        clock: Clock | None = None,
    ) -> "UnarchivingRecord":
        """Open a new request. Storage assigns the id on first persist.

        New requests always start as ``SOLICITADO``; naming a responsible
        at creation starts the work exactly as ``assign_responsible`` does.
        """
        clock = clock or SystemClock()
        now = clock.now()
        if isinstance(request_date, datetime) and ensure_utc(request_date) > now:
            raise ValidationError("request_date", "cannot be in the future")
        status = RecordStatus.SOLICITADO
        if assigned_to_id is not None:
            status = RecordStatus.DESARQUIVADO
        return cls(
            record_type=record_type,
            full_name=full_name,
            reference_code=reference_code,
            process_number=process_number,
            document_type=document_type,
            requesting_department=requesting_department,
            responsible_staff=responsible_staff,
            purpose=purpose,
            request_date=request_date,
            created_by_id=created_by_id,
            status=status,
            release_date=release_date,
            return_date=return_date,
            extension_requested=extension_requested,
            urgent=urgent,
            assigned_to_id=assigned_to_id,
            created_at=now,
            updated_at=now,
            clock=clock,
        )

    @classmethod
    def reconstruct(cls, *, clock: Clock | None = None, **props: Any) -> "UnarchivingRecord":
        """Rebuild a persisted record, failing loudly on anything invalid."""
        record_id = props.get("id")
        if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id <= 0:
            raise ReconstructionError(record_id, "missing or non-positive id")
        for name in ("created_at", "updated_at"):
            if props.get(name) is None:
                raise ReconstructionError(record_id, f"{name} is missing")
        try:
            return cls(clock=clock or SystemClock(), **props)
        except (ValidationError, InvalidStatusError) as exc:
            raise ReconstructionError(record_id, str(exc)) from exc
        except TypeError as exc:
            raise ReconstructionError(record_id, f"unexpected shape: {exc}") from exc

    # ── Lifecycle operations ─────────────────────────────────────────

    def change_status(self, new_status: RecordStatus | str) -> "UnarchivingRecord":
        target = RecordStatus.parse(new_status)
        if not self.status.can_transition_to(target):
            raise IllegalTransitionError(self.status.value, target.value)
        return self._commit(**self._status_changes(target))

    def override_status(self, new_status: RecordStatus | str) -> "UnarchivingRecord":
        """Set any status regardless of the transition graph (administrative use)."""
        target = RecordStatus.parse(new_status)
        return self._commit(**self._status_changes(target))

    def assign_responsible(
        self, staff_id: int, *, start_work: bool = True
    ) -> "UnarchivingRecord":
        """Set the responsible user.

        A pending record moves to ``DESARQUIVADO`` unless ``start_work`` is
        false, which callers use when they set the status explicitly.
        """
        if isinstance(staff_id, bool) or not isinstance(staff_id, int) or staff_id <= 0:
            raise ValidationError("assigned_to_id", "must be a positive user id")
        changes: dict[str, Any] = {"assigned_to_id": staff_id}
        if start_work and self.status.is_pending():
            changes["status"] = RecordStatus.DESARQUIVADO
        return self._commit(**changes)

    def complete(self) -> "UnarchivingRecord":
        if not self.status.can_be_completed():
            raise InvalidStateError(
                f"Record cannot be completed while {self.status.value}"
            )
        return self._commit(**self._status_changes(RecordStatus.FINALIZADO))

    def soft_delete(self) -> "UnarchivingRecord":
        if self.status.is_in_progress():
            raise InvalidStateError(
                f"Record is in progress ({self.status.value}) and cannot be deleted"
            )
        if self.deleted_at is not None:
            return self
        return self._commit(deleted_at=self.clock.now())

    def restore(self) -> "UnarchivingRecord":
        if self.deleted_at is None:
            return self
        return self._commit(deleted_at=None)

    def set_release_date(self, when: datetime) -> "UnarchivingRecord":
        return self._commit(release_date=when)

    def set_return_date(self, when: datetime | None) -> "UnarchivingRecord":
        return self._commit(return_date=when)

    def update_details(
        self,
        *,
        record_type: RecordType | str | None = None,
        full_name: str | None = None,
        process_number: str | None = None,
        document_type: str | None = None,
        requesting_department: str | None = None,
        responsible_staff: str | None = None,
        purpose: str | None = None,
        extension_requested: bool | None = None,
        urgent: bool | None = None,
    ) -> "UnarchivingRecord":
        """Edit descriptive fields and flags; ``None`` leaves a field unchanged."""
        candidates = {
            "record_type": record_type,
            "full_name": full_name,
            "process_number": process_number,
            "document_type": document_type,
            "requesting_department": requesting_department,
            "responsible_staff": responsible_staff,
            "purpose": purpose,
            "extension_requested": extension_requested,
            "urgent": urgent,
        }
        changes = {name: value for name, value in candidates.items() if value is not None}
        if not changes:
            return self
        return self._commit(**changes)

    # ── Queries ──────────────────────────────────────────────────────

    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def deadline(self, deadline_days: int = DEFAULT_DEADLINE_DAYS) -> datetime:
        return self.request_date + timedelta(days=deadline_days)

    def is_overdue(self, deadline_days: int = DEFAULT_DEADLINE_DAYS) -> bool:
        if self.status.is_final():
            return False
        return self.clock.now() > self.deadline(deadline_days)

    def days_until_deadline(self, deadline_days: int = DEFAULT_DEADLINE_DAYS) -> int | None:
        """Whole days left before the deadline; negative once overdue."""
        if self.status.is_final():
            return None
        remaining = self.deadline(deadline_days) - self.clock.now()
        return math.ceil(remaining.total_seconds() / 86400)

    def snapshot(self, deadline_days: int = DEFAULT_DEADLINE_DAYS) -> dict[str, Any]:
        """JSON-friendly view of the aggregate, used for audit before/after states."""
        return {
            "id": self.id,
            "record_type": self.record_type.value,
            "status": self.status.value,
            "full_name": self.full_name,
            "reference_code": self.reference_code,
            "process_number": self.process_number,
            "document_type": self.document_type,
            "requesting_department": self.requesting_department,
            "responsible_staff": self.responsible_staff,
            "purpose": self.purpose,
            "request_date": _isoformat(self.request_date),
            "release_date": _isoformat(self.release_date),
            "return_date": _isoformat(self.return_date),
            "extension_requested": self.extension_requested,
            "urgent": self.urgent,
            "created_by_id": self.created_by_id,
            "assigned_to_id": self.assigned_to_id,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
            "deleted_at": _isoformat(self.deleted_at),
            "is_overdue": self.is_overdue(deadline_days),
            "days_until_deadline": self.days_until_deadline(deadline_days),
        }

    # ── Internals ────────────────────────────────────────────────────

    def _status_changes(self, target: RecordStatus) -> dict[str, Any]:
        changes: dict[str, Any] = {"status": target}
        if target is RecordStatus.FINALIZADO and self.release_date is None:
            changes["release_date"] = self.clock.now()
        return changes

    def _commit(self, **changes: Any) -> "UnarchivingRecord":
        """Single mutation gate: validate the would-be state, then apply it."""
        changes["updated_at"] = self.clock.now()
        candidate = replace(self, **changes)
        for name in changes:
            setattr(self, name, getattr(candidate, name))
        return self

    def _validate(self) -> None:
        for name, limit in TEXT_FIELD_LIMITS.items():
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(name, "is required")
            if len(value) > limit:
                raise ValidationError(name, f"must be at most {limit} characters")

        if (
            isinstance(self.created_by_id, bool)
            or not isinstance(self.created_by_id, int)
            or self.created_by_id <= 0
        ):
            raise ValidationError("created_by_id", "must be a positive user id")
        if self.assigned_to_id is not None and (
            isinstance(self.assigned_to_id, bool)
            or not isinstance(self.assigned_to_id, int)
            or self.assigned_to_id <= 0
        ):
            raise ValidationError("assigned_to_id", "must be a positive user id")


def _optional_utc(name: str, value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ValidationError(name, "must be a datetime")
    return ensure_utc(value)


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
