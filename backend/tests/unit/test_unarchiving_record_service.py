"""Unit tests for the UnarchivingRecordService use cases."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from unarchiving.application.interfaces import (
    AuditSink,
    RecordCommentRepository,
    UnarchivingRecordRepository,
)
from unarchiving.application.schemas import (
    CommentCreate,
    RecordCreate,
    RecordListQuery,
    RecordResponse,
    RecordUpdate,
)
from unarchiving.application.services import UnarchivingRecordService
from unarchiving.config import Settings
from unarchiving.domain import authorization
from unarchiving.domain.clock import FixedClock
from unarchiving.domain.dashboard import summarize_records
from unarchiving.domain.entities import (
    Actor,
    AuditAction,
    AuditEntry,
    DashboardStats,
    DateRange,
    Pagination,
    RecordComment,
    RecordFilters,
    RecordPage,
    RecordStatus,
    RecordType,
    SortSpec,
    UnarchivingRecord,
)
from unarchiving.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    IllegalTransitionError,
    InvalidStateError,
    PermissionDeniedError,
    ValidationError,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

CREATOR = Actor.from_raw(1, ["USUARIO"])
ASSIGNEE = Actor.from_raw(2, ["USUARIO"])
STRANGER = Actor.from_raw(3, ["usuario"])
ADMIN = Actor.from_raw(99, ["admin"])
COORDINATOR = Actor.from_raw(50, ["Coordenador"])


class FakeUnarchivingRecordRepository(UnarchivingRecordRepository):
    """In-memory fake repository for unit testing.

    Stores copies so that, like a database, nothing changes until the
    service calls a persisting method.
    """

    def __init__(self, deadline_days: int = 30):
        self._records: dict[int, UnarchivingRecord] = {}
        self._next_id = 1
        self._deadline_days = deadline_days

    def _live(self) -> list[UnarchivingRecord]:
        return [replace(r) for r in self._records.values() if not r.is_deleted()]

    def _require(self, record_id: int | None) -> UnarchivingRecord:
        if record_id not in self._records:
            raise EntityNotFoundError("UnarchivingRecord", str(record_id))
        return self._records[record_id]

    async def create(self, record: UnarchivingRecord) -> UnarchivingRecord:
        stored = replace(record, id=self._next_id)
        self._next_id += 1
        self._records[stored.id] = stored
        return replace(stored)

    async def create_many(self, records: list[UnarchivingRecord]) -> list[UnarchivingRecord]:
        return [await self.create(r) for r in records]

    async def get_by_id(self, record_id: int) -> UnarchivingRecord | None:
        record = self._records.get(record_id)
        if record is None or record.is_deleted():
            return None
        return replace(record)

    async def get_by_id_including_deleted(self, record_id: int) -> UnarchivingRecord | None:
        record = self._records.get(record_id)
        return replace(record) if record else None

    async def get_by_reference_code(self, reference_code: str) -> UnarchivingRecord | None:
        return next((r for r in self._live() if r.reference_code == reference_code), None)

    async def exists_by_reference_code(self, reference_code: str) -> bool:
        return any(r.reference_code == reference_code for r in self._records.values())

    async def find_by_process_number(self, process_number: str) -> list[UnarchivingRecord]:
        return [r for r in self._live() if r.process_number == process_number]

    async def find_all(
        self,
        *,
        pagination: Pagination | None = None,
        sort: SortSpec | None = None,
        filters: RecordFilters | None = None,
    ) -> RecordPage:
        pagination = pagination or Pagination()
        sort = sort or SortSpec()
        filters = filters or RecordFilters()
        matches = [replace(r) for r in self._records.values() if filters.matches(r)]
        matches.sort(key=lambda r: (getattr(r, sort.field), r.id), reverse=sort.descending)
        items = matches[pagination.offset : pagination.offset + pagination.limit]
        return RecordPage(items=items, total=len(matches), page=pagination.page, limit=pagination.limit)

    async def find_overdue(self) -> list[UnarchivingRecord]:
        return [r for r in self._live() if r.is_overdue(self._deadline_days)]

    async def find_urgent(self) -> list[UnarchivingRecord]:
        return [r for r in self._live() if r.urgent]

    async def update(self, record: UnarchivingRecord) -> UnarchivingRecord:
        stored = self._require(record.id)
        self._records[record.id] = replace(record, deleted_at=stored.deleted_at)
        return replace(self._records[record.id])

    async def soft_delete(self, record: UnarchivingRecord) -> None:
        stored = self._require(record.id)
        self._records[record.id] = replace(
            stored, deleted_at=record.deleted_at, updated_at=record.updated_at
        )

    async def restore(self, record: UnarchivingRecord) -> None:
        stored = self._require(record.id)
        self._records[record.id] = replace(stored, deleted_at=None, updated_at=record.updated_at)

    async def hard_delete(self, record_id: int) -> None:
        self._require(record_id)
        del self._records[record_id]

    async def count_by_status(self, status: RecordStatus) -> int:
        return sum(1 for r in self._live() if r.status is status)

    async def count_by_type(self, record_type: RecordType) -> int:
        return sum(1 for r in self._live() if r.record_type is record_type)

    async def dashboard_stats(
        self,
        actor: Actor | None = None,
        date_range: DateRange | None = None,
    ) -> DashboardStats:
        records = self._live()
        if date_range is not None:
            records = [r for r in records if date_range.contains(r.created_at)]
        if actor is not None and not actor.is_admin:
            records = [r for r in records if r.created_by_id == actor.user_id]
        return summarize_records(
            records,
            deadline_days=self._deadline_days,
            include_assignees=actor is not None and actor.is_admin,
        )


class FakeAuditSink(AuditSink):
    def __init__(self):
        self.entries: list[AuditEntry] = []

    async def record(self, entry: AuditEntry) -> AuditEntry:
        entry.id = len(self.entries) + 1
        self.entries.append(entry)
        return entry

    async def list_for_record(self, record_id: int) -> list[AuditEntry]:
        return [e for e in self.entries if e.record_id == record_id]


class FakeRecordCommentRepository(RecordCommentRepository):
    def __init__(self):
        self.comments: list[RecordComment] = []

    async def add(self, comment: RecordComment) -> RecordComment:
        stored = replace(comment, id=len(self.comments) + 1)
        self.comments.append(stored)
        return replace(stored)

    async def list_for_record(self, record_id: int) -> list[RecordComment]:
        matches = [c for c in self.comments if c.record_id == record_id]
        return sorted(matches, key=lambda c: (c.created_at, c.id), reverse=True)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def repository() -> FakeUnarchivingRecordRepository:
    return FakeUnarchivingRecordRepository()


@pytest.fixture
def audit() -> FakeAuditSink:
    return FakeAuditSink()


@pytest.fixture
def comments() -> FakeRecordCommentRepository:
    return FakeRecordCommentRepository()


@pytest.fixture
def service(repository, audit, comments, clock) -> UnarchivingRecordService:
    settings = Settings(deadline_days=30, default_page_size=10, max_page_size=100)
    return UnarchivingRecordService(
        repository, audit, comments, clock=clock, settings=settings
    )


def new_request(reference: str = "NIC-2025-0001", **overrides) -> RecordCreate:
    values = dict(
        record_type=RecordType.PHYSICAL,
        full_name="Maria da Silva",
        reference_code=reference,
        process_number="0001234-56.2025",
        document_type="Laudo",
        requesting_department="Delegacia Geral",
        responsible_staff="João Souza",
        purpose="Instrução de processo",
        request_date=NOW - timedelta(days=1),
    )
    values.update(overrides)
    return RecordCreate(**values)


async def create_in_progress(service: UnarchivingRecordService, reference: str = "NIC-P") -> UnarchivingRecord:
    record = await service.create_record(CREATOR, new_request(reference))
    return await service.assign_responsible(CREATOR, record.id, ASSIGNEE.user_id)


# ── Create / read ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_record(service, audit):
    record = await service.create_record(CREATOR, new_request())
    assert record.id == 1
    assert record.status is RecordStatus.SOLICITADO
    assert record.created_by_id == CREATOR.user_id
    assert record.created_at == record.updated_at == NOW

    [entry] = audit.entries
    assert entry.action is AuditAction.CREATE
    assert entry.before is None
    assert entry.after["reference_code"] == "NIC-2025-0001"
    assert entry.occurred_at == NOW


@pytest.mark.asyncio
async def test_create_rejects_duplicate_reference(service):
    await service.create_record(CREATOR, new_request("DUP-1"))
    with pytest.raises(DuplicateEntityError):
        await service.create_record(ASSIGNEE, new_request("DUP-1"))


@pytest.mark.asyncio
async def test_create_rejects_future_request_date(service):
    with pytest.raises(ValidationError):
        await service.create_record(CREATOR, new_request(request_date=NOW + timedelta(days=1)))


@pytest.mark.asyncio
async def test_get_record_not_found(service):
    with pytest.raises(EntityNotFoundError):
        await service.get_record(ADMIN, 999)


@pytest.mark.asyncio
async def test_get_record_denies_strangers(service):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.get_record(STRANGER, record.id)
    assert exc_info.value.reason == authorization.REASON_NOT_OWNER
    assert (await service.get_record(ADMIN, record.id)).id == record.id


@pytest.mark.asyncio
async def test_response_schema_from_record(service):
    record = await service.create_record(CREATOR, new_request())
    response = RecordResponse.from_record(record, service.deadline_days)
    assert response.id == record.id
    assert response.status is RecordStatus.SOLICITADO
    assert response.days_until_deadline == 29
    assert response.is_overdue is False


# ── Listing ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_records_scopes_plain_users(service):
    await service.create_record(CREATOR, new_request("A-1"))
    await service.create_record(STRANGER, new_request("A-2"))
    third = await service.create_record(STRANGER, new_request("A-3"))
    await service.assign_responsible(STRANGER, third.id, CREATOR.user_id)

    own = await service.list_records(CREATOR)
    assert {r.reference_code for r in own.items} == {"A-1", "A-3"}
    assert own.total == 2

    everything = await service.list_records(ADMIN)
    assert everything.total == 3


@pytest.mark.asyncio
async def test_list_records_paginates_with_real_total(service):
    for i in range(5):
        await service.create_record(CREATOR, new_request(f"P-{i}"))

    page = await service.list_records(
        ADMIN, RecordListQuery(page=2, limit=2, sort_by="reference_code", sort_order="ASC")
    )
    assert [r.reference_code for r in page.items] == ["P-2", "P-3"]
    assert page.total == 5
    assert page.total_pages == 3


@pytest.mark.asyncio
async def test_list_records_filters(service):
    await service.create_record(CREATOR, new_request("F-1", full_name="Ana Lima", urgent=True))
    await service.create_record(CREATOR, new_request("F-2", record_type=RecordType.DIGITAL))

    by_search = await service.list_records(ADMIN, RecordListQuery(search="ana"))
    assert [r.reference_code for r in by_search.items] == ["F-1"]

    by_type = await service.list_records(ADMIN, RecordListQuery(record_types=[RecordType.DIGITAL]))
    assert [r.reference_code for r in by_type.items] == ["F-2"]

    by_urgent = await service.list_records(ADMIN, RecordListQuery(urgent=True))
    assert by_urgent.total == 1


@pytest.mark.asyncio
async def test_list_records_rejects_oversized_pages(service):
    with pytest.raises(ValidationError):
        await service.list_records(ADMIN, RecordListQuery(limit=500))


@pytest.mark.asyncio
async def test_list_records_rejects_unknown_sort_field(service):
    with pytest.raises(ValidationError):
        await service.list_records(ADMIN, RecordListQuery(sort_by="password"))


# ── Updates ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_creator_updates_pending_record(service, audit, clock):
    record = await service.create_record(CREATOR, new_request())
    clock.advance(hours=1)
    updated = await service.update_record(
        CREATOR, record.id, RecordUpdate(full_name="Ana Lima", urgent=True)
    )
    assert updated.full_name == "Ana Lima"
    assert updated.urgent is True
    assert updated.updated_at == NOW + timedelta(hours=1)

    entry = audit.entries[-1]
    assert entry.action is AuditAction.UPDATE
    assert entry.before["full_name"] == "Maria da Silva"
    assert entry.after["full_name"] == "Ana Lima"


@pytest.mark.asyncio
async def test_creator_cannot_update_after_work_starts(service, repository):
    record = await create_in_progress(service)
    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.update_record(CREATOR, record.id, RecordUpdate(full_name="X"))
    assert exc_info.value.reason == authorization.REASON_CREATOR_AFTER_PENDING
    assert (await repository.get_by_id(record.id)).full_name == "Maria da Silva"


@pytest.mark.asyncio
async def test_update_with_illegal_status_is_rejected_for_operators(service, repository):
    record = await create_in_progress(service)
    with pytest.raises(IllegalTransitionError):
        await service.update_record(
            COORDINATOR, record.id, RecordUpdate(status=RecordStatus.FINALIZADO, urgent=True)
        )
    stored = await repository.get_by_id(record.id)
    assert stored.status is RecordStatus.DESARQUIVADO
    assert stored.urgent is False


@pytest.mark.asyncio
async def test_update_assignment_and_status_together(service):
    record = await service.create_record(CREATOR, new_request())
    updated = await service.update_record(
        CREATOR,
        record.id,
        RecordUpdate(assigned_to_id=ASSIGNEE.user_id, status=RecordStatus.DESARQUIVADO),
    )
    assert updated.assigned_to_id == ASSIGNEE.user_id
    assert updated.status is RecordStatus.DESARQUIVADO


@pytest.mark.asyncio
async def test_update_explicit_status_wins_over_assignment_auto_advance(service):
    record = await service.create_record(CREATOR, new_request())
    updated = await service.update_record(
        CREATOR,
        record.id,
        RecordUpdate(assigned_to_id=ASSIGNEE.user_id, status=RecordStatus.NAO_LOCALIZADO),
    )
    assert updated.status is RecordStatus.NAO_LOCALIZADO
    assert updated.assigned_to_id == ASSIGNEE.user_id


@pytest.mark.asyncio
async def test_update_assignment_alone_still_starts_work(service):
    record = await service.create_record(CREATOR, new_request())
    updated = await service.update_record(
        CREATOR, record.id, RecordUpdate(assigned_to_id=ASSIGNEE.user_id)
    )
    assert updated.status is RecordStatus.DESARQUIVADO


@pytest.mark.asyncio
async def test_admin_update_overrides_the_graph(service):
    record = await service.create_record(CREATOR, new_request())
    await service.change_status(ADMIN, record.id, RecordStatus.NAO_LOCALIZADO)
    reopened = await service.update_record(ADMIN, record.id, RecordUpdate(status=RecordStatus.SOLICITADO))
    assert reopened.status is RecordStatus.SOLICITADO


@pytest.mark.asyncio
async def test_finalized_record_is_read_only_for_non_admins(service):
    record = await create_in_progress(service)
    await service.change_status(ASSIGNEE, record.id, RecordStatus.RETIRADO_PELO_SETOR)
    await service.complete_record(ASSIGNEE, record.id)

    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.update_record(ASSIGNEE, record.id, RecordUpdate(urgent=True))
    assert exc_info.value.reason == authorization.REASON_FINALIZED


@pytest.mark.asyncio
async def test_assign_responsible_starts_work(service, audit):
    record = await service.create_record(CREATOR, new_request())
    assigned = await service.assign_responsible(CREATOR, record.id, ASSIGNEE.user_id)
    assert assigned.status is RecordStatus.DESARQUIVADO
    assert assigned.assigned_to_id == ASSIGNEE.user_id
    assert audit.entries[-1].action is AuditAction.ASSIGN
    assert audit.entries[-1].before["status"] == "SOLICITADO"
    assert audit.entries[-1].after["status"] == "DESARQUIVADO"


@pytest.mark.asyncio
async def test_change_status_follows_graph(service):
    record = await create_in_progress(service)
    with pytest.raises(IllegalTransitionError):
        await service.change_status(ASSIGNEE, record.id, "FINALIZADO")
    moved = await service.change_status(ASSIGNEE, record.id, "retirado_pelo_setor")
    assert moved.status is RecordStatus.RETIRADO_PELO_SETOR


@pytest.mark.asyncio
async def test_forced_status_change_is_admin_only(service, audit):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.change_status(COORDINATOR, record.id, RecordStatus.FINALIZADO, force=True)
    assert exc_info.value.reason == authorization.REASON_ADMIN_ONLY_OVERRIDE

    forced = await service.change_status(ADMIN, record.id, RecordStatus.FINALIZADO, force=True)
    assert forced.status is RecordStatus.FINALIZADO
    assert forced.release_date == NOW
    assert audit.entries[-1].action is AuditAction.OVERRIDE_STATUS


@pytest.mark.asyncio
async def test_complete_record(service, clock):
    record = await create_in_progress(service)
    await service.change_status(ASSIGNEE, record.id, RecordStatus.REARQUIVAMENTO_SOLICITADO)
    clock.advance(days=2)
    completed = await service.complete_record(ASSIGNEE, record.id)
    assert completed.status is RecordStatus.FINALIZADO
    assert completed.release_date == NOW + timedelta(days=2)


@pytest.mark.asyncio
async def test_complete_pending_record_fails(service):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(InvalidStateError):
        await service.complete_record(CREATOR, record.id)


# ── Delete / restore ─────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_soft_delete_and_restore(service, audit):
    record = await service.create_record(CREATOR, new_request())

    result = await service.delete_record(CREATOR, record.id)
    assert result.already_deleted is False
    assert result.permanent is False
    with pytest.raises(EntityNotFoundError):
        await service.get_record(CREATOR, record.id)

    trash = await service.list_deleted(CREATOR)
    assert [r.id for r in trash.items] == [record.id]
    assert (await service.list_records(CREATOR)).total == 0

    restored = await service.restore_record(CREATOR, record.id)
    assert restored.deleted_at is None
    assert restored.status is RecordStatus.SOLICITADO
    assert (await service.get_record(CREATOR, record.id)).deleted_at is None

    actions = [e.action for e in audit.entries]
    assert actions == [AuditAction.CREATE, AuditAction.SOFT_DELETE, AuditAction.RESTORE]


@pytest.mark.asyncio
async def test_deleting_twice_is_a_successful_no_op(service, audit):
    record = await service.create_record(CREATOR, new_request())
    await service.delete_record(CREATOR, record.id)
    again = await service.delete_record(CREATOR, record.id)
    assert again.already_deleted is True
    assert len(audit.entries) == 2


@pytest.mark.asyncio
async def test_admin_cannot_delete_in_progress_record(service, repository):
    record = await create_in_progress(service)
    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.delete_record(ADMIN, record.id)
    assert exc_info.value.reason == authorization.REASON_IN_PROGRESS
    assert (await repository.get_by_id(record.id)).deleted_at is None


@pytest.mark.asyncio
async def test_assignee_cannot_soft_delete_in_progress_record(service):
    record = await create_in_progress(service)
    with pytest.raises(InvalidStateError):
        await service.delete_record(ASSIGNEE, record.id)


@pytest.mark.asyncio
async def test_stranger_cannot_delete_or_restore(service):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(PermissionDeniedError):
        await service.delete_record(STRANGER, record.id)
    await service.delete_record(CREATOR, record.id)
    with pytest.raises(PermissionDeniedError):
        await service.restore_record(STRANGER, record.id)


@pytest.mark.asyncio
async def test_permanent_delete_is_admin_only(service, repository, audit):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(PermissionDeniedError) as exc_info:
        await service.delete_record(CREATOR, record.id, permanent=True)
    assert exc_info.value.reason == authorization.REASON_ADMIN_ONLY_HARD_DELETE

    result = await service.delete_record(ADMIN, record.id, permanent=True)
    assert result.permanent is True
    assert await repository.get_by_id_including_deleted(record.id) is None
    assert audit.entries[-1].action is AuditAction.HARD_DELETE
    assert audit.entries[-1].after is None


@pytest.mark.asyncio
async def test_permanent_delete_refuses_in_progress(service):
    record = await create_in_progress(service)
    with pytest.raises(PermissionDeniedError):
        await service.delete_record(ADMIN, record.id, permanent=True)


# ── Read models ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_list_overdue_and_urgent_respect_visibility(service):
    await service.create_record(CREATOR, new_request("O-1", request_date=NOW - timedelta(days=40)))
    await service.create_record(STRANGER, new_request("O-2", request_date=NOW - timedelta(days=40), urgent=True))
    await service.create_record(CREATOR, new_request("O-3", request_date=NOW - timedelta(days=3)))

    assert [r.reference_code for r in await service.list_overdue(CREATOR)] == ["O-1"]
    assert {r.reference_code for r in await service.list_overdue(ADMIN)} == {"O-1", "O-2"}
    assert await service.list_urgent(CREATOR) == []
    assert [r.reference_code for r in await service.list_urgent(ADMIN)] == ["O-2"]


@pytest.mark.asyncio
async def test_dashboard_scopes_non_admins(service):
    await service.create_record(CREATOR, new_request("D-1"))
    await service.create_record(STRANGER, new_request("D-2"))
    in_progress = await create_in_progress(service, "D-3")
    await service.change_status(ASSIGNEE, in_progress.id, RecordStatus.RETIRADO_PELO_SETOR)
    await service.complete_record(ASSIGNEE, in_progress.id)

    mine = await service.get_dashboard_stats(CREATOR)
    assert mine.total == 2
    assert mine.completed == 1
    assert mine.completion_rate == 50.0
    assert mine.per_assignee is None

    everything = await service.get_dashboard_stats(ADMIN)
    assert everything.total == 3
    assert everything.pending == 2
    assert everything.per_assignee[ASSIGNEE.user_id].completed == 1
    assert everything.by_type == {"FISICO": 3}


@pytest.mark.asyncio
async def test_dashboard_range_is_capped(service):
    with pytest.raises(ValidationError):
        await service.get_dashboard_stats(ADMIN, start=NOW - timedelta(days=800), end=NOW)
    stats = await service.get_dashboard_stats(ADMIN, start=NOW - timedelta(days=30), end=NOW)
    assert stats.total == 0


@pytest.mark.asyncio
async def test_history_lists_audit_entries(service):
    record = await service.create_record(CREATOR, new_request())
    await service.assign_responsible(CREATOR, record.id, ASSIGNEE.user_id)
    history = await service.get_history(ASSIGNEE, record.id)
    assert [e.action for e in history] == [AuditAction.CREATE, AuditAction.ASSIGN]
    with pytest.raises(PermissionDeniedError):
        await service.get_history(STRANGER, record.id)


@pytest.mark.asyncio
async def test_get_record_by_reference_code(service):
    record = await service.create_record(CREATOR, new_request("NIC-BAR-1"))
    found = await service.get_record_by_reference_code(CREATOR, "  NIC-BAR-1 ")
    assert found.id == record.id

    with pytest.raises(PermissionDeniedError):
        await service.get_record_by_reference_code(STRANGER, "NIC-BAR-1")
    with pytest.raises(EntityNotFoundError):
        await service.get_record_by_reference_code(ADMIN, "NIC-MISSING")
    with pytest.raises(ValidationError):
        await service.get_record_by_reference_code(ADMIN, "   ")


@pytest.mark.asyncio
async def test_get_record_by_reference_code_skips_deleted(service):
    record = await service.create_record(CREATOR, new_request("NIC-BAR-2"))
    await service.delete_record(CREATOR, record.id)
    with pytest.raises(EntityNotFoundError):
        await service.get_record_by_reference_code(ADMIN, "NIC-BAR-2")


# ── Comments ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_add_comment_trims_text_and_audits(service, audit, comments):
    record = await service.create_record(CREATOR, new_request())
    author = Actor.from_raw(ASSIGNEE.user_id, ["usuario"], name="Ana Souza")
    await service.assign_responsible(CREATOR, record.id, ASSIGNEE.user_id)

    saved = await service.add_comment(author, record.id, CommentCreate(comment="  Caixa 12 localizada  "))

    assert saved.id == 1
    assert saved.comment == "Caixa 12 localizada"
    assert saved.author_id == ASSIGNEE.user_id
    assert saved.author_name == "Ana Souza"
    assert saved.created_at == NOW
    assert len(comments.comments) == 1

    entry = audit.entries[-1]
    assert entry.action is AuditAction.COMMENT
    assert entry.record_id == record.id
    assert entry.before is None
    assert entry.after["comment"] == "Caixa 12 localizada"


@pytest.mark.asyncio
async def test_add_comment_without_name_uses_generic_author(service):
    record = await service.create_record(CREATOR, new_request())
    saved = await service.add_comment(CREATOR, record.id, CommentCreate(comment="ok"))
    assert saved.author_name == "Usuário"


@pytest.mark.asyncio
async def test_add_comment_rejects_blank_text(service, audit, comments):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(ValidationError) as exc_info:
        await service.add_comment(CREATOR, record.id, CommentCreate(comment="   "))
    assert exc_info.value.field == "comment"
    assert comments.comments == []
    assert [e.action for e in audit.entries] == [AuditAction.CREATE]


@pytest.mark.asyncio
async def test_comments_require_view_permission(service, comments):
    record = await service.create_record(CREATOR, new_request())
    with pytest.raises(PermissionDeniedError):
        await service.add_comment(STRANGER, record.id, CommentCreate(comment="hello"))
    with pytest.raises(PermissionDeniedError):
        await service.list_comments(STRANGER, record.id)
    with pytest.raises(EntityNotFoundError):
        await service.add_comment(ADMIN, 999, CommentCreate(comment="hello"))
    assert comments.comments == []


@pytest.mark.asyncio
async def test_list_comments_newest_first(service, clock):
    record = await service.create_record(CREATOR, new_request())
    await service.add_comment(CREATOR, record.id, CommentCreate(comment="first"))
    clock.advance(minutes=5)
    await service.add_comment(ADMIN, record.id, CommentCreate(comment="second"))

    listed = await service.list_comments(CREATOR, record.id)
    assert [c.comment for c in listed] == ["second", "first"]


@pytest.mark.asyncio
async def test_comments_stay_readable_on_deleted_records(service):
    record = await service.create_record(CREATOR, new_request())
    await service.add_comment(CREATOR, record.id, CommentCreate(comment="before delete"))
    await service.delete_record(CREATOR, record.id)

    listed = await service.list_comments(CREATOR, record.id)
    assert [c.comment for c in listed] == ["before delete"]
    with pytest.raises(EntityNotFoundError):
        await service.add_comment(CREATOR, record.id, CommentCreate(comment="after delete"))
