"""Abstract repository interface (port) for UnarchivingRecord persistence."""

from abc import ABC, abstractmethod

from unarchiving.domain.entities import (
    Actor,
    DashboardStats,
    DateRange,
    Pagination,
    RecordFilters,
    RecordPage,
    RecordStatus,
    RecordType,
    SortSpec,
    UnarchivingRecord,
)


class UnarchivingRecordRepository(ABC):
    """Port for unarchiving record persistence, implemented in the infrastructure layer.

    Lookups return ``None`` for absent or soft-deleted rows; mutating
    operations raise ``EntityNotFoundError`` when the id does not exist.
    Rows that fail domain invariants on load raise ``ReconstructionError``.
    """

    @abstractmethod
    async def create(self, record: UnarchivingRecord) -> UnarchivingRecord:
        """Persist a new record and return it with its storage-assigned id."""
        ...

    @abstractmethod
    async def create_many(self, records: list[UnarchivingRecord]) -> list[UnarchivingRecord]:
        """Persist a batch of new records in one unit of work."""
        ...

    @abstractmethod
    async def get_by_id(self, record_id: int) -> UnarchivingRecord | None:
        """Retrieve a live (not soft-deleted) record."""
        ...

    @abstractmethod
    async def get_by_id_including_deleted(self, record_id: int) -> UnarchivingRecord | None:
        """Retrieve a record whether or not it is soft-deleted."""
        ...

    @abstractmethod
    async def get_by_reference_code(self, reference_code: str) -> UnarchivingRecord | None:
        ...

    @abstractmethod
    async def exists_by_reference_code(self, reference_code: str) -> bool:
        """Check uniqueness across live and soft-deleted rows."""
        ...

    @abstractmethod
    async def find_by_process_number(self, process_number: str) -> list[UnarchivingRecord]:
        ...

    @abstractmethod
    async def find_all(
        self,
        *,
        pagination: Pagination | None = None,
        sort: SortSpec | None = None,
        filters: RecordFilters | None = None,
    ) -> RecordPage:
        """Retrieve a filtered, sorted page plus the total count of matches."""
        ...

    @abstractmethod
    async def find_overdue(self) -> list[UnarchivingRecord]:
        """Live, non-terminal records whose deadline has passed."""
        ...

    @abstractmethod
    async def find_urgent(self) -> list[UnarchivingRecord]:
        ...

    @abstractmethod
    async def update(self, record: UnarchivingRecord) -> UnarchivingRecord:
        """Persist every attribute except ``deleted_at``."""
        ...

    @abstractmethod
    async def soft_delete(self, record: UnarchivingRecord) -> None:
        """Persist the record's deletion mark."""
        ...

    @abstractmethod
    async def restore(self, record: UnarchivingRecord) -> None:
        """Persist the cleared deletion mark."""
        ...

    @abstractmethod
    async def hard_delete(self, record_id: int) -> None:
        """Remove the row permanently."""
        ...

    @abstractmethod
    async def count_by_status(self, status: RecordStatus) -> int:
        ...

    @abstractmethod
    async def count_by_type(self, record_type: RecordType) -> int:
        ...

    @abstractmethod
    async def dashboard_stats(
        self,
        actor: Actor | None = None,
        date_range: DateRange | None = None,
    ) -> DashboardStats:
        """Aggregate counters over live records.

        Non-admin actors only see records they created; admins also get a
        per-assignee breakdown.
        """
        ...
