from .unarchiving_record_repository import UnarchivingRecordRepository
from .audit_sink import AuditSink
from .record_comment_repository import RecordCommentRepository

__all__ = [
    "UnarchivingRecordRepository",
    "AuditSink",
    "RecordCommentRepository",
]
