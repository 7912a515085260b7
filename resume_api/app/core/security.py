import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import jwt

from resume_api.app.core.config import Settings

log = logging.getLogger(__name__)


def create_access_token(
    data: dict,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT for calling the aggregation endpoint.

    Args:
        data (dict): The claims to encode in the token (e.g., "sub").
        settings (Settings): The application settings holding the secret and algorithm.
        expires_delta (timedelta | None): Lifetime of the token. If None, no "exp" claim is set.

    Returns:
        str: The encoded JWT.

    Notes:
        1. Copy the data to avoid modifying the original.
        2. Add an "exp" claim when a lifetime is given.
        3. Sign with the configured secret and allow-listed algorithm.
        4. No database or network access in this function.

    """
    _msg = "Creating access token"
    log.debug(_msg)
    to_encode = data.copy()
    if expires_delta:
        to_encode["exp"] = datetime.now(UTC) + expires_delta
    return jwt.encode(
        to_encode,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm.value,
    )


def verify_token(token: str, settings: Settings) -> dict[str, Any]:
    """Verify a JWT's signature, structure and registered claims.

    Args:
        token (str): The encoded JWT, without any header prefix.
        settings (Settings): The application settings holding the secret and algorithm.

    Returns:
        dict[str, Any]: The decoded claims.

    Raises:
        JWTError: If the signature does not match, the token is malformed, it was
            signed with a different algorithm, or its "exp"/"nbf" claims are not satisfied.

    Notes:
        1. Only the single configured algorithm is accepted.
        2. The claims are returned but are not used to scope any query.
        3. No database or network access in this function.

    """
    _msg = "Verifying access token"
    log.debug(_msg)
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm.value],
    )
