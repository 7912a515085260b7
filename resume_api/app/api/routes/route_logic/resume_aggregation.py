import asyncio
import json
import logging
from decimal import Decimal
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy import Integer, TextClause, bindparam, text
from sqlalchemy.dialects.postgresql import ARRAY

from resume_api.app.core.exceptions import (
    AggregationError,
    PoolExhaustedError,
    QueryError,
)
from resume_api.app.database.executor import QueryExecutor

log = logging.getLogger(__name__)

RESUMES_TABLE = "resumes"

# Response key -> child table. Every child table references resumes.id via resume_id.
CHILD_TABLES: dict[str, str] = {
    "educations": "resume_educations",
    "workExperiences": "resume_work_experiences",
    "computerSkills": "resume_computer_skills",
    "skills": "resume_skills",
    "languages": "resume_languages",
    "awards": "resume_awards",
}

RESPONSE_KEYS: tuple[str, ...] = ("resumes", *CHILD_TABLES)


def resumes_query() -> TextClause:
    """Build the statement selecting every resume."""
    return text(f"select * from {RESUMES_TABLE}")


def child_query(table: str) -> TextClause:
    """Build the statement selecting a child table's rows for a set of resume ids.

    Args:
        table (str): One of the `CHILD_TABLES` values.

    Returns:
        TextClause: A statement with an `ids` parameter bound as an integer array.

    Raises:
        ValueError: If the table is not a known child table.

    """
    if table not in CHILD_TABLES.values():
        raise ValueError(f"Unknown child table: {table}")
    return text(
        f"select * from {table} where resume_id = any(cast(:ids as integer[]))",
    ).bindparams(bindparam("ids", type_=ARRAY(Integer)))


def collect_resume_ids(resumes: list[dict[str, Any]]) -> list[int]:
    """Return the distinct resume ids, in first-seen order."""
    return list(dict.fromkeys(row["id"] for row in resumes))


def encode_resume(row: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of a resume row with `user_id` as a decimal string.

    `user_id` values can exceed the range a JSON client decodes into a double
    without loss, so the exact integer is sent as text. A NULL stays null.
    """
    encoded = dict(row)
    user_id = encoded.get("user_id")
    if user_id is not None:
        encoded["user_id"] = str(user_id)
    return encoded


async def fetch_children(
    executor: QueryExecutor,
    resume_ids: list[int],
) -> dict[str, list[dict[str, Any]]]:
    """Fetch every child table's rows for the given resume ids concurrently.

    Args:
        executor (QueryExecutor): The executor used for each query.
        resume_ids (list[int]): The key set scoping every child query.

    Returns:
        dict[str, list[dict[str, Any]]]: Rows keyed by response key.

    Raises:
        QueryError: If any child query fails.
        PoolExhaustedError: If any child query cannot get a connection.

    Notes:
        1. All six queries are started before any is awaited, so the total wait is
           bounded by the slowest query.
        2. The key set is always a bound array parameter.
        3. An empty key set still issues the queries; each returns no rows.
        4. The first failure cancels the remaining queries and is re-raised once
           they have released their connections.

    """
    params = {"ids": resume_ids}
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = {
                key: tg.create_task(executor.execute(child_query(table), params))
                for key, table in CHILD_TABLES.items()
            }
    except ExceptionGroup as eg:
        raise eg.exceptions[0]
    return {key: task.result() for key, task in tasks.items()}


async def aggregate_resumes(executor: QueryExecutor) -> dict[str, list[dict[str, Any]]]:
    """Assemble every resume and its child records into one response object.

    Args:
        executor (QueryExecutor): The executor bound to the shared connection pool.

    Returns:
        dict[str, list[dict[str, Any]]]: A mapping with the keys `resumes`, `educations`,
            `workExperiences`, `computerSkills`, `skills`, `languages` and `awards`.

    Raises:
        AggregationError: If the resume query or any child query fails. No partial
            response is produced.

    Notes:
        1. Select every row from `resumes`.
        2. Collect the resume ids into the key set.
        3. Fetch the six child tables concurrently, scoped to the key set.
        4. Re-encode each resume's `user_id` as a string.
        5. Merge the resumes and child collections; children are not nested under resumes.
        6. Database access: one query on `resumes`, then six concurrent child queries.

    """
    _msg = "aggregate_resumes starting"
    log.debug(_msg)

    try:
        resumes = await executor.execute(resumes_query())
    except (QueryError, PoolExhaustedError) as e:
        _msg = "Failed to fetch resumes"
        log.exception(_msg)
        raise AggregationError(_msg) from e

    resume_ids = collect_resume_ids(resumes)

    try:
        children = await fetch_children(executor, resume_ids)
    except (QueryError, PoolExhaustedError) as e:
        _msg = f"Failed to fetch child records for {len(resume_ids)} resumes"
        log.exception(_msg)
        raise AggregationError(_msg) from e

    response = {"resumes": [encode_resume(row) for row in resumes], **children}

    _msg = f"aggregate_resumes returning {len(resumes)} resumes"
    log.debug(_msg)
    return response


def serialize_response(response: dict[str, Any]) -> str:
    """Serialize the response object to JSON text.

    Column values such as dates and datetimes are converted with FastAPI's
    `jsonable_encoder`. Decimals are sent as strings so `numeric` columns keep
    their exact value.
    """
    encoded = jsonable_encoder(response, custom_encoder={Decimal: str})
    return json.dumps(encoded, ensure_ascii=False)


async def build_response(executor: QueryExecutor) -> str:
    """Aggregate every resume and return the serialized JSON payload."""
    response = await aggregate_resumes(executor)
    return serialize_response(response)
