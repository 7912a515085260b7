import asyncio
import logging
from typing import Any

import asyncpg
from sqlalchemy import TextClause, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine

from resume_api.app.core.exceptions import (
    PoolExhaustedError,
    QueryError,
    QueryTimeoutError,
)

log = logging.getLogger(__name__)


class QueryExecutor:
    """Runs single parameterized statements against a pooled engine.

    Each call checks out one connection, executes one statement and returns
    the connection to the pool on every exit path, including failure,
    timeout and task cancellation.

    Attributes:
        engine (AsyncEngine): The shared engine whose pool connections are borrowed.
        timeout (float | None): Seconds allowed per statement, including the wait
            for a connection. None or 0 disables the limit.

    """

    def __init__(self, engine: AsyncEngine, timeout: float | None = None):
        self.engine = engine
        self.timeout = timeout or None

    async def execute(
        self,
        statement: str | TextClause,
        params: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Execute a statement and return its rows as dictionaries.

        Args:
            statement (str | TextClause): The SQL to run. Plain strings are wrapped
                with `sqlalchemy.text`; values must be passed as bound parameters.
            params (dict[str, Any] | None): Bound parameter values keyed by name.

        Returns:
            list[dict[str, Any]]: One dictionary per row, keyed by column name.

        Raises:
            PoolExhaustedError: No pooled connection became available in time.
            QueryTimeoutError: The statement exceeded the configured timeout.
            QueryError: The database could not be reached, refused the login or
                rejected the statement.

        Notes:
            1. Acquire a connection with `async with`, so it is released exactly once.
            2. Execute the statement with its bound parameters.
            3. Materialize the rows before the connection is released.
            4. Translate SQLAlchemy and driver failures into the API's exceptions;
               the statement text and parameters are only written to the debug log.

        """
        if isinstance(statement, str):
            statement = text(statement)

        try:
            async with asyncio.timeout(self.timeout):
                async with self.engine.connect() as conn:
                    result = await conn.execute(statement, params or {})
                    rows = [dict(row) for row in result.mappings()]
        except sa_exc.TimeoutError as e:
            _msg = "Timed out waiting for a pooled database connection"
            log.warning(_msg)
            raise PoolExhaustedError() from e
        except TimeoutError as e:
            _msg = f"Query exceeded the {self.timeout}s timeout"
            log.warning(_msg)
            log.debug("Timed out statement: %s", statement)
            raise QueryTimeoutError() from e
        except (sa_exc.SQLAlchemyError, asyncpg.PostgresError, OSError) as e:
            # Refused connections and rejected logins surface unwrapped at connect time.
            _msg = f"Query failed: {type(e).__name__}"
            log.error(_msg)
            log.debug("Failed statement: %s", statement)
            raise QueryError() from e

        _msg = f"Query returned {len(rows)} rows"
        log.debug(_msg)
        return rows
