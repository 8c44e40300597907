import logging
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.orm.exc import StaleDataError

from laundry_service.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
TRANSIENT_SQLSTATES = {"40001", "40P01"}


engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    pool_recycle=3600
)
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


class TransientConflictError(Exception):
    """Raised when a write lost a race and the unit of work should be replayed."""


def is_transient_error(exc: BaseException) -> bool:
    if isinstance(exc, (TransientConflictError, StaleDataError)):
        return True
    if isinstance(exc, DBAPIError):
        orig = exc.orig
        sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
        if sqlstate in TRANSIENT_SQLSTATES:
            return True
        return "database is locked" in str(orig)
    return False


async def run_in_transaction(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    max_retries: int | None = None
) -> T:
    """Run ``operation`` and commit, replaying it on transient conflicts.

    Every attempt starts from a rolled back session, so ``operation`` must
    re-read whatever state it validates against.
    """
    attempts = max_retries or settings.db_max_retries

    for attempt in range(1, attempts + 1):
        try:
            result = await operation()
            await session.commit()
            return result
        except Exception as e:
            await session.rollback()
            if attempt < attempts and is_transient_error(e):
                logger.warning(
                    f"Transient conflict on attempt {attempt}/{attempts}, retrying: "
                    f"{type(e).__name__}: {e}"
                )
                continue
            raise

    raise RuntimeError("run_in_transaction exhausted without result")
