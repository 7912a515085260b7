import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from resume_api.app.core.config import Settings
from resume_api.app.database.executor import QueryExecutor

log = logging.getLogger(__name__)


def create_db_engine(settings: Settings) -> AsyncEngine:
    """Create the process-wide connection pool.

    Args:
        settings (Settings): Application settings with the database URL and pool limits.

    Returns:
        AsyncEngine: An asyncio engine backed by a bounded connection pool.

    Notes:
        1. The pool holds at most `settings.pool_size` connections; overflow is disabled
           so the limit is strict.
        2. Checkouts beyond the limit wait up to `settings.pool_timeout` seconds.
        3. Connections are pinged on checkout so a stale connection is replaced
           instead of failing a query.
        4. No network access happens until the first connection is checked out.

    """
    _msg = f"Creating database engine with pool size {settings.pool_size}"
    log.debug(_msg)
    return create_async_engine(
        str(settings.database_url),
        pool_size=settings.pool_size,
        max_overflow=0,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
    )


async def dispose_engine(engine: AsyncEngine) -> None:
    """Close every pooled connection.

    Args:
        engine (AsyncEngine): The engine created by `create_db_engine`.

    Notes:
        1. Called once from the application lifespan on shutdown.
        2. Connections still checked out are closed when they are returned.

    """
    _msg = "Disposing database engine"
    log.debug(_msg)
    await engine.dispose()


def get_query_executor(request: Request) -> QueryExecutor:
    """Dependency to provide a query executor bound to the application's engine.

    Args:
        request (Request): The incoming request, used to reach `app.state`.

    Returns:
        QueryExecutor: An executor over the shared engine with the configured timeout.

    """
    state = request.app.state
    return QueryExecutor(state.engine, timeout=state.query_timeout)
