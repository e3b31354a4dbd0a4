"""Abstract interface for recording audit entries."""

from abc import ABC, abstractmethod

from unarchiving.domain.entities import AuditEntry


class AuditSink(ABC):
    """Port that receives one entry per state-changing use case."""

    @abstractmethod
    async def record(self, entry: AuditEntry) -> AuditEntry:
        """Persist an audit entry and return it with its assigned ID."""
        ...

    @abstractmethod
    async def list_for_record(self, record_id: int) -> list[AuditEntry]:
        """Entries for one record, oldest first."""
        ...
