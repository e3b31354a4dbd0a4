"""Concrete AuditSink implementation storing entries in the audit_logs table."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unarchiving.application.interfaces import AuditSink
from unarchiving.domain.clock import ensure_utc
from unarchiving.domain.entities import AuditAction, AuditEntry
from unarchiving.infrastructure.database.models import AuditLogModel


class SQLAlchemyAuditLogRepository(AuditSink):
    """Implements the AuditSink port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: AuditLogModel) -> AuditEntry:
        """Map ORM model → domain entity."""
        return AuditEntry(
            id=model.id,
            actor_id=model.actor_id,
            action=AuditAction(model.action),
            record_id=model.record_id,
            before=model.before,
            after=model.after,
            occurred_at=ensure_utc(model.occurred_at),
        )

    def _to_model(self, entity: AuditEntry) -> AuditLogModel:
        """Map domain entity → ORM model (for creation)."""
        return AuditLogModel(
            actor_id=entity.actor_id,
            action=entity.action.value,
            record_id=entity.record_id,
            before=entity.before,
            after=entity.after,
            occurred_at=entity.occurred_at,
        )

    async def record(self, entry: AuditEntry) -> AuditEntry:
        model = self._to_model(entry)
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_for_record(self, record_id: int) -> list[AuditEntry]:
        stmt = (
            select(AuditLogModel)
            .where(AuditLogModel.record_id == record_id)
            .order_by(AuditLogModel.occurred_at.asc(), AuditLogModel.id.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]
