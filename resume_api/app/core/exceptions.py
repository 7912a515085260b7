"""Exceptions raised while serving the resume aggregation endpoint.

Every exception carries the HTTP status it maps to and a client-safe message.
The application registers a single handler for `ResumeApiError` that renders
`to_dict()` as the JSON response body.

"""

from typing import Any


class ResumeApiError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body sent to the client."""
        return {"error": self.message}


class CredentialMissingError(ResumeApiError):
    """The Authorization header is absent or lacks the `jwt ` prefix."""

    status_code = 403
    default_message = "No Authorization header"


class CredentialInvalidError(ResumeApiError):
    """The bearer token failed verification."""

    status_code = 403
    default_message = "Invalid JWT in Authorization header"


class QueryError(ResumeApiError):
    """A statement was malformed or rejected by the database."""

    default_message = "Database query failed"


class QueryTimeoutError(QueryError):
    """A statement did not complete within the configured query timeout."""

    default_message = "Database query timed out"


class PoolExhaustedError(ResumeApiError):
    """No pooled connection became available within the pool timeout."""

    default_message = "No database connection available"


class AggregationError(ResumeApiError):
    """The aggregated response could not be assembled.

    The public message is always generic; the originating `QueryError` or
    `PoolExhaustedError` is kept as the exception's `__cause__`.
    """

    def __init__(self, message: str | None = None):
        super().__init__(self.default_message)
        self.detail = message
