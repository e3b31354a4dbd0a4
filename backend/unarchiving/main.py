"""Application bootstrap: schema creation and per-unit-of-work service wiring.

Usage:
    from unarchiving.main import startup, open_record_service

    await startup()
    async with open_record_service() as service:
        record = await service.create_record(actor, data)
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from unarchiving.application.services import UnarchivingRecordService
from unarchiving.config import Settings, get_settings
from unarchiving.domain.clock import Clock, SystemClock
from unarchiving.infrastructure.database import Base, engine
from unarchiving.infrastructure.database.repositories import (
    SQLAlchemyAuditLogRepository,
    SQLAlchemyRecordCommentRepository,
    SQLAlchemyUnarchivingRecordRepository,
)
from unarchiving.infrastructure.database.session import async_session_factory
from unarchiving.infrastructure.logging.log_config import setup_logging

logger = logging.getLogger(__name__)


async def _ensure_database_exists(settings: Settings) -> None:
    """Create the PostgreSQL database if it does not yet exist.

    Connects to the default ``postgres`` maintenance database, checks for the
    target database name, and issues ``CREATE DATABASE`` when missing. Other
    backends are left alone.
    """
    if not settings.database_url.startswith("postgresql"):
        return

    import asyncpg

    parsed = urlparse(settings.database_url)
    db_name = parsed.path.lstrip("/")
    if not db_name:
        return

    maintenance_url = settings.database_url.rsplit("/", 1)[0] + "/postgres"
    maintenance_url = maintenance_url.replace("postgresql+asyncpg://", "postgresql://", 1)

    try:
        conn = await asyncpg.connect(maintenance_url)
        try:
            exists = await conn.fetchval(
                "SELECT 1 FROM pg_database WHERE datname = $1", db_name
            )
            if not exists:
                # CREATE DATABASE cannot run inside a transaction block
                await conn.execute(f'CREATE DATABASE "{db_name}"')
                logger.info("Created database '%s'", db_name)
            else:
                logger.debug("Database '%s' already exists", db_name)
        finally:
            await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        logger.warning("Could not auto-create database '%s': %s", db_name, exc)


async def init_database(bind: AsyncEngine | None = None) -> None:
    """Create all tables that do not exist yet."""
    bind = bind or engine
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (%s)", ", ".join(sorted(Base.metadata.tables)))


async def startup(settings: Settings | None = None) -> None:
    """Configure logging and prepare the database. Call once per process."""
    settings = settings or get_settings()
    setup_logging(settings)
    await _ensure_database_exists(settings)
    await init_database()
    logger.info("%s %s started (%s)", settings.app_title, settings.app_version, settings.app_env)


def build_record_service(
    session: AsyncSession,
    *,
    clock: Clock | None = None,
    settings: Settings | None = None,
) -> UnarchivingRecordService:
    """Wire the record service to repositories bound to ``session``."""
    settings = settings or get_settings()
    clock = clock or SystemClock()
    repository = SQLAlchemyUnarchivingRecordRepository(
        session,
        clock,
        deadline_days=settings.deadline_days,
        due_soon_days=settings.due_soon_days,
    )
    audit_sink = SQLAlchemyAuditLogRepository(session)
    comments = SQLAlchemyRecordCommentRepository(session)
    return UnarchivingRecordService(
        repository, audit_sink, comments, clock=clock, settings=settings
    )


@asynccontextmanager
async def open_record_service(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    clock: Clock | None = None,
    settings: Settings | None = None,
) -> AsyncIterator[UnarchivingRecordService]:
    """One unit of work: commit when the block succeeds, roll back otherwise."""
    session_factory = session_factory or async_session_factory
    async with session_factory() as session:
        try:
            yield build_record_service(session, clock=clock, settings=settings)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
