"""Concrete repository implementation for UnarchivingRecord backed by SQLAlchemy."""

import logging
from datetime import timedelta

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from unarchiving.application.interfaces import UnarchivingRecordRepository
from unarchiving.domain.clock import Clock, SystemClock
from unarchiving.domain.dashboard import DEFAULT_DUE_SOON_DAYS, summarize_records
from unarchiving.domain.entities import (
    DEFAULT_DEADLINE_DAYS,
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
from unarchiving.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from unarchiving.infrastructure.database.mappers import (
    apply_to_model,
    entity_to_model,
    model_to_entity,
)
from unarchiving.infrastructure.database.models import (
    REFERENCE_CODE_CONSTRAINT,
    RecordCommentModel,
    UnarchivingRecordModel,
)

logger = logging.getLogger(__name__)

_TERMINAL_TOKENS = [status.value for status in RecordStatus if status.is_final()]

# SQLite reports the column, PostgreSQL the constraint name.
_REFERENCE_CODE_MARKERS = (REFERENCE_CODE_CONSTRAINT, "unarchiving_records.reference_code")


class SQLAlchemyUnarchivingRecordRepository(UnarchivingRecordRepository):
    """Implements the UnarchivingRecordRepository port using SQLAlchemy async sessions.

    Time-based queries (overdue, dashboard) take "now" from the injected
    clock rather than the database, so the same statements run on SQLite
    and PostgreSQL.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock | None = None,
        *,
        deadline_days: int = DEFAULT_DEADLINE_DAYS,
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._deadline_days = deadline_days
        self._due_soon_days = due_soon_days

    def _to_entity(self, model: UnarchivingRecordModel) -> UnarchivingRecord:
        return model_to_entity(model, self._clock)

    # ── Create ───────────────────────────────────────────────────────

    async def create(self, record: UnarchivingRecord) -> UnarchivingRecord:
        model = entity_to_model(record)
        model.id = None
        self._session.add(model)
        await self._flush_new(record.reference_code)
        logger.debug("Inserted unarchiving record %s (%s)", model.id, model.reference_code)
        return self._to_entity(model)

    async def create_many(self, records: list[UnarchivingRecord]) -> list[UnarchivingRecord]:
        models = [entity_to_model(record) for record in records]
        for model in models:
            model.id = None
        self._session.add_all(models)
        await self._flush_new(", ".join(r.reference_code for r in records))
        logger.info("Inserted %d unarchiving records", len(models))
        return [self._to_entity(model) for model in models]

    async def _flush_new(self, reference_code: str) -> None:
        """Flush pending inserts; only a reference code clash becomes a duplicate error."""
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if not _is_reference_code_conflict(exc):
                raise
            raise DuplicateEntityError(
                "UnarchivingRecord", "reference_code", reference_code
            ) from exc

    # ── Lookups ──────────────────────────────────────────────────────

    async def get_by_id(self, record_id: int) -> UnarchivingRecord | None:
        stmt = select(UnarchivingRecordModel).where(
            UnarchivingRecordModel.id == record_id,
            UnarchivingRecordModel.deleted_at.is_(None),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_id_including_deleted(self, record_id: int) -> UnarchivingRecord | None:
        model = await self._session.get(UnarchivingRecordModel, record_id)
        return self._to_entity(model) if model else None

    async def get_by_reference_code(self, reference_code: str) -> UnarchivingRecord | None:
        stmt = select(UnarchivingRecordModel).where(
            UnarchivingRecordModel.reference_code == reference_code,
            UnarchivingRecordModel.deleted_at.is_(None),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def exists_by_reference_code(self, reference_code: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(UnarchivingRecordModel)
            .where(UnarchivingRecordModel.reference_code == reference_code)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one() > 0

    async def find_by_process_number(self, process_number: str) -> list[UnarchivingRecord]:
        stmt = (
            select(UnarchivingRecordModel)
            .where(
                UnarchivingRecordModel.process_number == process_number,
                UnarchivingRecordModel.deleted_at.is_(None),
            )
            .order_by(UnarchivingRecordModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

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

        count_stmt = _apply_filters(
            select(func.count()).select_from(UnarchivingRecordModel), filters
        )
        total = (await self._session.execute(count_stmt)).scalar_one()

        column = getattr(UnarchivingRecordModel, sort.field)
        stmt = (
            _apply_filters(select(UnarchivingRecordModel), filters)
            .order_by(
                column.desc() if sort.descending else column.asc(),
                UnarchivingRecordModel.id.desc() if sort.descending else UnarchivingRecordModel.id.asc(),
            )
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self._session.execute(stmt)
        items = [self._to_entity(row) for row in result.scalars().all()]
        return RecordPage(items=items, total=total, page=pagination.page, limit=pagination.limit)

    async def find_overdue(self) -> list[UnarchivingRecord]:
        cutoff = self._clock.now() - timedelta(days=self._deadline_days)
        stmt = (
            select(UnarchivingRecordModel)
            .where(
                UnarchivingRecordModel.deleted_at.is_(None),
                UnarchivingRecordModel.status.not_in(_TERMINAL_TOKENS),
                UnarchivingRecordModel.request_date < cutoff,
            )
            .order_by(UnarchivingRecordModel.request_date.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def find_urgent(self) -> list[UnarchivingRecord]:
        stmt = (
            select(UnarchivingRecordModel)
            .where(
                UnarchivingRecordModel.deleted_at.is_(None),
                UnarchivingRecordModel.urgent.is_(True),
            )
            .order_by(UnarchivingRecordModel.request_date.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    # ── Mutations ────────────────────────────────────────────────────

    async def update(self, record: UnarchivingRecord) -> UnarchivingRecord:
        model = await self._require_model(record.id)
        apply_to_model(record, model)
        await self._session.flush()
        return self._to_entity(model)

    async def soft_delete(self, record: UnarchivingRecord) -> None:
        model = await self._require_model(record.id)
        model.deleted_at = record.deleted_at or self._clock.now()
        model.updated_at = record.updated_at
        await self._session.flush()
        logger.debug("Soft-deleted unarchiving record %s", record.id)

    async def restore(self, record: UnarchivingRecord) -> None:
        model = await self._require_model(record.id)
        model.deleted_at = None
        model.updated_at = record.updated_at
        await self._session.flush()
        logger.debug("Restored unarchiving record %s", record.id)

    async def hard_delete(self, record_id: int) -> None:
        model = await self._require_model(record_id)
        await self._session.execute(
            delete(RecordCommentModel).where(RecordCommentModel.record_id == record_id)
        )
        await self._session.delete(model)
        await self._session.flush()
        logger.info("Permanently deleted unarchiving record %s", record_id)

    async def _require_model(self, record_id: int | None) -> UnarchivingRecordModel:
        model = (
            await self._session.get(UnarchivingRecordModel, record_id)
            if record_id is not None
            else None
        )
        if model is None:
            raise EntityNotFoundError("UnarchivingRecord", record_id if record_id is not None else "None")
        return model

    # ── Aggregations ─────────────────────────────────────────────────

    async def count_by_status(self, status: RecordStatus) -> int:
        stmt = (
            select(func.count())
            .select_from(UnarchivingRecordModel)
            .where(
                UnarchivingRecordModel.status == RecordStatus.parse(status).value,
                UnarchivingRecordModel.deleted_at.is_(None),
            )
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def count_by_type(self, record_type: RecordType) -> int:
        stmt = (
            select(func.count())
            .select_from(UnarchivingRecordModel)
            .where(
                UnarchivingRecordModel.record_type == RecordType.parse(record_type).value,
                UnarchivingRecordModel.deleted_at.is_(None),
            )
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def dashboard_stats(
        self,
        actor: Actor | None = None,
        date_range: DateRange | None = None,
    ) -> DashboardStats:
        stmt = select(UnarchivingRecordModel).where(UnarchivingRecordModel.deleted_at.is_(None))
        if date_range is not None:
            stmt = stmt.where(
                UnarchivingRecordModel.created_at.between(date_range.start, date_range.end)
            )
        if actor is not None and not actor.is_admin:
            stmt = stmt.where(UnarchivingRecordModel.created_by_id == actor.user_id)

        result = await self._session.execute(stmt)
        records = [self._to_entity(row) for row in result.scalars().all()]
        return summarize_records(
            records,
            deadline_days=self._deadline_days,
            due_soon_days=self._due_soon_days,
            include_assignees=actor is not None and actor.is_admin,
        )


def _apply_filters(stmt: Select, filters: RecordFilters) -> Select:
    """Translate RecordFilters into WHERE clauses; mirrors ``RecordFilters.matches``."""
    if filters.only_deleted:
        stmt = stmt.where(UnarchivingRecordModel.deleted_at.is_not(None))
    elif not filters.include_deleted:
        stmt = stmt.where(UnarchivingRecordModel.deleted_at.is_(None))

    if filters.statuses:
        stmt = stmt.where(
            UnarchivingRecordModel.status.in_(sorted(s.value for s in filters.statuses))
        )
    if filters.record_types:
        stmt = stmt.where(
            UnarchivingRecordModel.record_type.in_(sorted(t.value for t in filters.record_types))
        )
    if filters.created_by_id is not None:
        stmt = stmt.where(UnarchivingRecordModel.created_by_id == filters.created_by_id)
    if filters.assigned_to_id is not None:
        stmt = stmt.where(UnarchivingRecordModel.assigned_to_id == filters.assigned_to_id)
    if filters.visible_to_user_id is not None:
        stmt = stmt.where(
            or_(
                UnarchivingRecordModel.created_by_id == filters.visible_to_user_id,
                UnarchivingRecordModel.assigned_to_id == filters.visible_to_user_id,
            )
        )
    if filters.urgent is not None:
        stmt = stmt.where(UnarchivingRecordModel.urgent.is_(filters.urgent))
    if filters.created_between is not None:
        stmt = stmt.where(
            UnarchivingRecordModel.created_at.between(
                filters.created_between.start, filters.created_between.end
            )
        )
    if filters.search and filters.search.strip():
        pattern = f"%{_escape_like(filters.search.strip())}%"
        stmt = stmt.where(
            or_(
                UnarchivingRecordModel.full_name.ilike(pattern, escape="\\"),
                UnarchivingRecordModel.reference_code.ilike(pattern, escape="\\"),
                UnarchivingRecordModel.process_number.ilike(pattern, escape="\\"),
            )
        )
    return stmt


def _escape_like(term: str) -> str:
    """Make ``%`` and ``_`` in user input match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _is_reference_code_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _REFERENCE_CODE_MARKERS)
