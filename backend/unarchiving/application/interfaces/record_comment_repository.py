"""Abstract interface for record comment persistence."""

from abc import ABC, abstractmethod

from unarchiving.domain.entities import RecordComment


class RecordCommentRepository(ABC):
    """Port for record comments, implemented in the infrastructure layer."""

    @abstractmethod
    async def add(self, comment: RecordComment) -> RecordComment:
        """Persist a new comment and return it with its assigned ID."""
        ...

    @abstractmethod
    async def list_for_record(self, record_id: int) -> list[RecordComment]:
        """Comments on one record, newest first."""
        ...
