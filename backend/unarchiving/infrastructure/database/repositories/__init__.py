from .unarchiving_record_repository import SQLAlchemyUnarchivingRecordRepository
from .audit_log_repository import SQLAlchemyAuditLogRepository
from .record_comment_repository import SQLAlchemyRecordCommentRepository

__all__ = [
    "SQLAlchemyUnarchivingRecordRepository",
    "SQLAlchemyAuditLogRepository",
    "SQLAlchemyRecordCommentRepository",
]
