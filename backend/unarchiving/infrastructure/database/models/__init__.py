from .unarchiving_record import REFERENCE_CODE_CONSTRAINT, UnarchivingRecordModel
from .audit_log import AuditLogModel
from .record_comment import RecordCommentModel

__all__ = [
    "REFERENCE_CODE_CONSTRAINT",
    "UnarchivingRecordModel",
    "AuditLogModel",
    "RecordCommentModel",
]
