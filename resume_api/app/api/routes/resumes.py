import logging
from typing import Any

from fastapi import APIRouter, Depends, Response

from resume_api.app.api.routes.route_logic.resume_aggregation import build_response
from resume_api.app.core.auth import require_jwt
from resume_api.app.database.database import get_query_executor
from resume_api.app.database.executor import QueryExecutor

log = logging.getLogger(__name__)

router = APIRouter(tags=["resumes"])

# The endpoint is a read-only snapshot; every method is served the same way.
ALLOWED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/", methods=ALLOWED_METHODS)
async def get_resumes(
    claims: dict[str, Any] = Depends(require_jwt),
    executor: QueryExecutor = Depends(get_query_executor),
) -> Response:
    """
    Return every resume with its child records as a single JSON document.

    Args:
        claims (dict[str, Any]): Verified token claims from `require_jwt`. They are
            not used to scope the query.
        executor (QueryExecutor): Executor bound to the shared connection pool.

    Returns:
        Response: 200 with the aggregated `application/json` payload.

    Raises:
        CredentialMissingError: Raised by `require_jwt` before this handler runs.
        CredentialInvalidError: Raised by `require_jwt` before this handler runs.
        AggregationError: Any database failure; rendered as a 500 with a generic body.

    Notes:
        1. Authentication happens in the `require_jwt` dependency, so the
           aggregation only runs for verified requests.
        2. Database access: one query on `resumes`, then six concurrent child queries.

    """
    _msg = "get_resumes starting"
    log.debug(_msg)
    payload = await build_response(executor)
    return Response(content=payload, media_type="application/json")
