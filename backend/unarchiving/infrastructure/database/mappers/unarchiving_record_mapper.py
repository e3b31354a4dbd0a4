"""Translation between ``unarchiving_records`` rows and UnarchivingRecord entities.

Reads are strict: a row with a missing id, an unknown status or any other
invariant violation raises ``ReconstructionError`` so bad data surfaces for
triage instead of being coerced into a plausible-looking entity. The one
tolerated legacy shape is a blank process number, which predates the field
being mandatory and is shown as ``"N/A"``.
"""

from datetime import datetime
from enum import Enum

from unarchiving.domain.clock import Clock, ensure_utc
from unarchiving.domain.entities import UnarchivingRecord
from unarchiving.infrastructure.database.models import UnarchivingRecordModel

PROCESS_NUMBER_PLACEHOLDER = "N/A"

# Attributes written by ``apply_to_model``. ``deleted_at`` is owned by the
# soft-delete/restore paths; ``id`` and ``created_at`` never change.
_MUTABLE_COLUMNS = (
    "record_type",
    "status",
    "full_name",
    "reference_code",
    "process_number",
    "document_type",
    "requesting_department",
    "responsible_staff",
    "purpose",
    "request_date",
    "release_date",
    "return_date",
    "extension_requested",
    "urgent",
    "assigned_to_id",
    "updated_at",
)


def model_to_entity(model: UnarchivingRecordModel, clock: Clock | None = None) -> UnarchivingRecord:
    """Map ORM model → domain entity."""
    process_number = model.process_number
    if process_number is None or not process_number.strip():
        process_number = PROCESS_NUMBER_PLACEHOLDER

    return UnarchivingRecord.reconstruct(
        clock=clock,
        id=model.id,
        record_type=model.record_type,
        status=model.status,
        full_name=model.full_name,
        reference_code=model.reference_code,
        process_number=process_number,
        document_type=model.document_type,
        requesting_department=model.requesting_department,
        responsible_staff=model.responsible_staff,
        purpose=model.purpose,
        request_date=_utc(model.request_date),
        release_date=_utc(model.release_date),
        return_date=_utc(model.return_date),
        extension_requested=bool(model.extension_requested),
        urgent=bool(model.urgent),
        created_by_id=model.created_by_id,
        assigned_to_id=model.assigned_to_id,
        created_at=_utc(model.created_at),
        updated_at=_utc(model.updated_at),
        deleted_at=_utc(model.deleted_at),
    )


def entity_to_model(entity: UnarchivingRecord) -> UnarchivingRecordModel:
    """Map domain entity → ORM model (for creation)."""
    model = UnarchivingRecordModel(
        id=entity.id,
        created_by_id=entity.created_by_id,
        created_at=entity.created_at,
        deleted_at=entity.deleted_at,
    )
    apply_to_model(entity, model)
    return model


def apply_to_model(entity: UnarchivingRecord, model: UnarchivingRecordModel) -> None:
    """Copy the entity's mutable state onto an existing row, except ``deleted_at``."""
    for name in _MUTABLE_COLUMNS:
        setattr(model, name, _column_value(getattr(entity, name)))


def _column_value(value):
    # Enums are stored by their token.
    return value.value if isinstance(value, Enum) else value


def _utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back; stored values are always UTC.
    return ensure_utc(value) if value is not None else None
