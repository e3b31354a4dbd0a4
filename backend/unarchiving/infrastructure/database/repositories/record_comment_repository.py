"""Concrete RecordCommentRepository implementation backed by SQLAlchemy."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unarchiving.application.interfaces import RecordCommentRepository
from unarchiving.domain.entities import RecordComment
from unarchiving.infrastructure.database.models import RecordCommentModel


class SQLAlchemyRecordCommentRepository(RecordCommentRepository):
    """Implements the RecordCommentRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: RecordCommentModel) -> RecordComment:
        return RecordComment(
            id=model.id,
            record_id=model.record_id,
            author_id=model.author_id,
            author_name=model.author_name,
            comment=model.comment,
            created_at=model.created_at,
        )

    async def add(self, comment: RecordComment) -> RecordComment:
        model = RecordCommentModel(
            record_id=comment.record_id,
            author_id=comment.author_id,
            author_name=comment.author_name,
            comment=comment.comment,
            created_at=comment.created_at,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_entity(model)

    async def list_for_record(self, record_id: int) -> list[RecordComment]:
        stmt = (
            select(RecordCommentModel)
            .where(RecordCommentModel.record_id == record_id)
            .order_by(RecordCommentModel.created_at.desc(), RecordCommentModel.id.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]
