"""This module provides the connection pool and query execution for the application.

Functions:
    create_db_engine: Builds the process-wide asyncio engine with a bounded pool.
    dispose_engine: Closes every pooled connection on shutdown.
    get_query_executor: FastAPI dependency returning a `QueryExecutor` over the engine.

Classes:
    QueryExecutor: Runs one parameterized statement per pooled connection checkout.

"""

from .database import create_db_engine, dispose_engine, get_query_executor
from .executor import QueryExecutor

__all__ = ["QueryExecutor", "create_db_engine", "dispose_engine", "get_query_executor"]
