from .unarchiving_record_service import UnarchivingRecordService

__all__ = [
    "UnarchivingRecordService",
]
