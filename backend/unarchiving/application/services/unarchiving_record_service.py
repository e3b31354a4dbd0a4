"""Application service (use cases) for unarchiving records.

Each use case loads the aggregate through the repository port, checks the
authorization rules for the acting user, runs one entity operation and
persists the result. State-changing use cases also hand an ``AuditEntry``
with the before/after snapshots to the audit sink.
"""

import logging
from datetime import datetime, timedelta, timezone

from unarchiving.application.interfaces import (
    AuditSink,
    RecordCommentRepository,
    UnarchivingRecordRepository,
)
from unarchiving.application.schemas.unarchiving_record import (
    CommentCreate,
    DeletionResult,
    RecordCreate,
    RecordListQuery,
    RecordUpdate,
)
from unarchiving.config import Settings, get_settings
from unarchiving.domain import authorization
from unarchiving.domain.clock import Clock, SystemClock
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
    SortSpec,
    UnarchivingRecord,
)
from unarchiving.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class UnarchivingRecordService:
    """Orchestrates the record lifecycle.

    Depends on the record repository, audit sink and comment repository ports (DI).
    """

    def __init__(
        self,
        repository: UnarchivingRecordRepository,
        audit_sink: AuditSink,
        comments: RecordCommentRepository,
        clock: Clock | None = None,
        settings: Settings | None = None,
    ):
        self._repository = repository
        self._audit = audit_sink
        self._comments = comments
        self._clock = clock or SystemClock()
        self._settings = settings or get_settings()

    @property
    def deadline_days(self) -> int:
        return self._settings.deadline_days

    # ── Create / read ────────────────────────────────────────────────

    async def create_record(self, actor: Actor, data: RecordCreate) -> UnarchivingRecord:
        if await self._repository.exists_by_reference_code(data.reference_code):
            raise DuplicateEntityError("UnarchivingRecord", "reference_code", data.reference_code)

        record = UnarchivingRecord.create(
            record_type=data.record_type,
            full_name=data.full_name,
            reference_code=data.reference_code,
            process_number=data.process_number,
            document_type=data.document_type,
            requesting_department=data.requesting_department,
            responsible_staff=data.responsible_staff,
            purpose=data.purpose,
            request_date=data.request_date,
            return_date=data.return_date,
            extension_requested=data.extension_requested,
            urgent=data.urgent,
            created_by_id=actor.user_id,
            clock=self._clock,
        )
        saved = await self._repository.create(record)
        await self._audit_change(actor, AuditAction.CREATE, saved, before=None)
        logger.info(
            "Record %s (%s) created by user %s", saved.id, saved.reference_code, actor.user_id
        )
        return saved

    async def get_record(self, actor: Actor, record_id: int) -> UnarchivingRecord:
        record = await self._load(record_id)
        self._authorize(
            "view record", authorization.view_denial_reason(actor, record), actor, record
        )
        return record

    async def get_record_by_reference_code(
        self, actor: Actor, reference_code: str
    ) -> UnarchivingRecord:
        """Look up a live record by its barcode / reference code."""
        code = reference_code.strip() if isinstance(reference_code, str) else ""
        if not code:
            raise ValidationError("reference_code", "is required")
        record = await self._repository.get_by_reference_code(code)
        if record is None:
            raise EntityNotFoundError("UnarchivingRecord", code)
        self._authorize(
            "view record", authorization.view_denial_reason(actor, record), actor, record
        )
        return record

    async def list_records(
        self, actor: Actor, query: RecordListQuery | None = None
    ) -> RecordPage:
        query = query or RecordListQuery()
        filters = self._filters_from_query(actor, query)
        return await self._repository.find_all(
            pagination=self._pagination(query),
            sort=SortSpec(field=query.sort_by, descending=query.sort_order == "DESC"),
            filters=filters,
        )

    async def list_deleted(
        self, actor: Actor, query: RecordListQuery | None = None
    ) -> RecordPage:
        """Trash view: soft-deleted records the actor could restore."""
        query = query or RecordListQuery()
        filters = RecordFilters(
            search=query.search,
            statuses=frozenset(query.statuses),
            record_types=frozenset(query.record_types),
            created_by_id=None if actor.is_admin else actor.user_id,
            only_deleted=True,
        )
        return await self._repository.find_all(
            pagination=self._pagination(query),
            sort=SortSpec(field=query.sort_by, descending=query.sort_order == "DESC"),
            filters=filters,
        )

    async def list_overdue(self, actor: Actor) -> list[UnarchivingRecord]:
        records = await self._repository.find_overdue()
        return [r for r in records if authorization.can_view(actor, r)]

    async def list_urgent(self, actor: Actor) -> list[UnarchivingRecord]:
        records = await self._repository.find_urgent()
        return [r for r in records if authorization.can_view(actor, r)]

    async def get_history(self, actor: Actor, record_id: int) -> list[AuditEntry]:
        record = await self._load(record_id, include_deleted=True)
        self._authorize(
            "view history", authorization.view_denial_reason(actor, record), actor, record
        )
        return await self._audit.list_for_record(record_id)

    # ── Updates ──────────────────────────────────────────────────────

    async def update_record(
        self, actor: Actor, record_id: int, data: RecordUpdate
    ) -> UnarchivingRecord:
        """Apply a partial update.

        Details are applied first, then an explicit status, then the
        assignment, then dates. Assignment only starts work on a pending
        record when no explicit status was requested. Administrators'
        status changes go through the override; everyone else follows the
        transition graph.
        """
        record = await self._load(record_id)
        self._authorize(
            "edit record", authorization.edit_denial_reason(actor, record), actor, record
        )
        before = self._snapshot(record)

        record.update_details(
            record_type=data.record_type,
            full_name=data.full_name,
            process_number=data.process_number,
            document_type=data.document_type,
            requesting_department=data.requesting_department,
            responsible_staff=data.responsible_staff,
            purpose=data.purpose,
            extension_requested=data.extension_requested,
            urgent=data.urgent,
        )
        explicit_status = data.status is not None and data.status is not record.status
        if explicit_status:
            if authorization.can_override_status(actor, record):
                record.override_status(data.status)
            else:
                record.change_status(data.status)
        if data.assigned_to_id is not None and data.assigned_to_id != record.assigned_to_id:
            record.assign_responsible(data.assigned_to_id, start_work=not explicit_status)
        if data.release_date is not None:
            record.set_release_date(data.release_date)
        if data.return_date is not None:
            record.set_return_date(data.return_date)

        saved = await self._repository.update(record)
        await self._audit_change(actor, AuditAction.UPDATE, saved, before=before)
        logger.info("Record %s updated by user %s", record_id, actor.user_id)
        return saved

    async def assign_responsible(
        self, actor: Actor, record_id: int, staff_id: int
    ) -> UnarchivingRecord:
        record = await self._load(record_id)
        self._authorize(
            "assign record", authorization.edit_denial_reason(actor, record), actor, record
        )
        before = self._snapshot(record)
        record.assign_responsible(staff_id)
        saved = await self._repository.update(record)
        await self._audit_change(actor, AuditAction.ASSIGN, saved, before=before)
        logger.info(
            "Record %s assigned to user %s by user %s (status %s)",
            record_id, staff_id, actor.user_id, saved.status.value,
        )
        return saved

    async def change_status(
        self,
        actor: Actor,
        record_id: int,
        new_status: RecordStatus | str,
        *,
        force: bool = False,
    ) -> UnarchivingRecord:
        """Move a record along the transition graph, or override it when ``force`` is set."""
        record = await self._load(record_id)
        if force:
            self._authorize(
                "override status",
                authorization.override_denial_reason(actor, record),
                actor,
                record,
            )
        else:
            self._authorize(
                "change status", authorization.edit_denial_reason(actor, record), actor, record
            )
        before = self._snapshot(record)
        previous = record.status

        if force:
            record.override_status(new_status)
            action = AuditAction.OVERRIDE_STATUS
        else:
            record.change_status(new_status)
            action = AuditAction.CHANGE_STATUS

        saved = await self._repository.update(record)
        await self._audit_change(actor, action, saved, before=before)
        logger.info(
            "Record %s status %s -> %s by user %s%s",
            record_id, previous.value, saved.status.value, actor.user_id,
            " (override)" if force else "",
        )
        return saved

    async def complete_record(self, actor: Actor, record_id: int) -> UnarchivingRecord:
        record = await self._load(record_id)
        self._authorize(
            "complete record", authorization.edit_denial_reason(actor, record), actor, record
        )
        before = self._snapshot(record)
        record.complete()
        saved = await self._repository.update(record)
        await self._audit_change(actor, AuditAction.COMPLETE, saved, before=before)
        logger.info("Record %s completed by user %s", record_id, actor.user_id)
        return saved

    # ── Delete / restore ─────────────────────────────────────────────

    async def delete_record(
        self, actor: Actor, record_id: int, *, permanent: bool = False
    ) -> DeletionResult:
        record = await self._load(record_id, include_deleted=True)

        if permanent:
            self._authorize(
                "permanently delete record",
                authorization.hard_delete_denial_reason(actor, record),
                actor,
                record,
            )
            before = self._snapshot(record)
            await self._repository.hard_delete(record_id)
            await self._audit.record(
                AuditEntry(
                    actor_id=actor.user_id,
                    action=AuditAction.HARD_DELETE,
                    record_id=record_id,
                    before=before,
                    after=None,
                    occurred_at=self._clock.now(),
                )
            )
            logger.info("Record %s permanently deleted by user %s", record_id, actor.user_id)
            return DeletionResult(
                record_id=record_id,
                permanent=True,
                message="Record permanently deleted",
            )

        if record.is_deleted():
            self._authorize(
                "delete record", authorization.view_denial_reason(actor, record), actor, record
            )
            logger.info("Record %s was already deleted; nothing to do", record_id)
            return DeletionResult(
                record_id=record_id,
                already_deleted=True,
                message="Record was already deleted",
            )

        self._authorize(
            "delete record", authorization.delete_denial_reason(actor, record), actor, record
        )
        before = self._snapshot(record)
        record.soft_delete()
        await self._repository.soft_delete(record)
        await self._audit_change(actor, AuditAction.SOFT_DELETE, record, before=before)
        logger.info("Record %s deleted by user %s", record_id, actor.user_id)
        return DeletionResult(record_id=record_id, message="Record deleted")

    async def restore_record(self, actor: Actor, record_id: int) -> UnarchivingRecord:
        record = await self._load(record_id, include_deleted=True)
        self._authorize(
            "restore record", authorization.restore_denial_reason(actor, record), actor, record
        )
        if not record.is_deleted():
            return record

        before = self._snapshot(record)
        record.restore()
        await self._repository.restore(record)
        await self._audit_change(actor, AuditAction.RESTORE, record, before=before)
        logger.info("Record %s restored by user %s", record_id, actor.user_id)
        return record

    # ── Comments ─────────────────────────────────────────────────────

    async def add_comment(
        self, actor: Actor, record_id: int, data: CommentCreate
    ) -> RecordComment:
        """Append a comment to a record the actor can see."""
        record = await self._load(record_id)
        self._authorize(
            "comment on record", authorization.view_denial_reason(actor, record), actor, record
        )
        new_comment = RecordComment.create(
            record_id=record_id,
            comment=data.comment,
            author_id=actor.user_id,
            author_name=actor.name,
            clock=self._clock,
        )
        saved = await self._comments.add(new_comment)
        await self._audit.record(
            AuditEntry(
                actor_id=actor.user_id,
                action=AuditAction.COMMENT,
                record_id=record_id,
                before=None,
                after=saved.snapshot(),
                occurred_at=self._clock.now(),
            )
        )
        logger.info("Comment %s added to record %s by user %s", saved.id, record_id, actor.user_id)
        return saved

    async def list_comments(self, actor: Actor, record_id: int) -> list[RecordComment]:
        """Comments on a record, newest first. Soft-deleted records keep theirs readable."""
        record = await self._load(record_id, include_deleted=True)
        self._authorize(
            "view comments", authorization.view_denial_reason(actor, record), actor, record
        )
        return await self._comments.list_for_record(record_id)

    # ── Dashboard ────────────────────────────────────────────────────

    async def get_dashboard_stats(
        self,
        actor: Actor,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> DashboardStats:
        date_range = None
        if start is not None or end is not None:
            now = self._clock.now()
            max_days = self._settings.max_dashboard_range_days
            date_range = DateRange(
                start=start if start is not None else now - timedelta(days=max_days),
                end=end if end is not None else now,
            )
            if date_range.days > max_days:
                raise ValidationError(
                    "date_range", f"must not span more than {max_days} days"
                )
        return await self._repository.dashboard_stats(actor=actor, date_range=date_range)

    # ── Helpers ──────────────────────────────────────────────────────

    async def _load(self, record_id: int, *, include_deleted: bool = False) -> UnarchivingRecord:
        if include_deleted:
            record = await self._repository.get_by_id_including_deleted(record_id)
        else:
            record = await self._repository.get_by_id(record_id)
        if record is None:
            raise EntityNotFoundError("UnarchivingRecord", record_id)
        return record

    @staticmethod
    def _authorize(
        action: str, reason: str | None, actor: Actor, record: UnarchivingRecord
    ) -> None:
        if reason is None:
            return
        logger.warning(
            "User %s denied to %s %s: %s", actor.user_id, action, record.id, reason
        )
        raise PermissionDeniedError(action, reason)

    def _pagination(self, query: RecordListQuery) -> Pagination:
        return Pagination(
            page=query.page,
            limit=query.limit or self._settings.default_page_size,
            max_limit=self._settings.max_page_size,
        )

    def _filters_from_query(self, actor: Actor, query: RecordListQuery) -> RecordFilters:
        created_between = None
        if query.start_date is not None or query.end_date is not None:
            created_between = DateRange(
                start=query.start_date or datetime.min.replace(tzinfo=timezone.utc),
                end=query.end_date or self._clock.now(),
            )
        return RecordFilters(
            search=query.search,
            statuses=frozenset(query.statuses),
            record_types=frozenset(query.record_types),
            created_by_id=query.created_by_id,
            assigned_to_id=query.assigned_to_id,
            visible_to_user_id=None if authorization.sees_all_records(actor) else actor.user_id,
            urgent=query.urgent,
            created_between=created_between,
            include_deleted=query.include_deleted and actor.is_admin,
        )

    def _snapshot(self, record: UnarchivingRecord) -> dict:
        return record.snapshot(self.deadline_days)

    async def _audit_change(
        self,
        actor: Actor,
        action: AuditAction,
        record: UnarchivingRecord,
        *,
        before: dict | None,
    ) -> None:
        await self._audit.record(
            AuditEntry(
                actor_id=actor.user_id,
                action=action,
                record_id=record.id,
                before=before,
                after=self._snapshot(record),
                occurred_at=self._clock.now(),
            )
        )
