import logging
from typing import Any

from fastapi import Depends, Request
from jose import JWTError

from resume_api.app.core.config import Settings, get_settings
from resume_api.app.core.exceptions import (
    CredentialInvalidError,
    CredentialMissingError,
)
from resume_api.app.core.security import verify_token

log = logging.getLogger(__name__)

AUTH_HEADER = "Authorization"
AUTH_JWT_PREFIX = "jwt "


def extract_token(authorization: str | None) -> str:
    """Strip the `jwt ` prefix from an Authorization header value.

    Args:
        authorization (str | None): The raw header value, or None if absent.

    Returns:
        str: The token following the prefix.

    Raises:
        CredentialMissingError: If the header is absent or does not start with
            the case-sensitive literal prefix `jwt `.

    """
    if not authorization or not authorization.startswith(AUTH_JWT_PREFIX):
        raise CredentialMissingError()
    return authorization[len(AUTH_JWT_PREFIX) :]


def require_jwt(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """Gate a request on a valid `Authorization: jwt <token>` header.

    Args:
        request (Request): The incoming request.
        settings (Settings): Application settings with the JWT secret and algorithm.

    Returns:
        dict[str, Any]: The verified token claims.

    Raises:
        CredentialMissingError: The header is absent or lacks the `jwt ` prefix.
        CredentialInvalidError: The token failed verification for any reason.

    Notes:
        1. Read the Authorization header and strip the prefix.
        2. Verify the token with the configured secret and algorithm.
        3. Any JWTError (bad signature, malformed token, algorithm mismatch,
           expired claims) is reported as an invalid credential.
        4. Both failures map to 403 through the application exception handler;
           only the error wording differs.

    """
    token = extract_token(request.headers.get(AUTH_HEADER))

    try:
        claims = verify_token(token, settings)
    except JWTError as e:
        _msg = f"Rejecting request with invalid token: {e}"
        log.info(_msg)
        raise CredentialInvalidError() from e

    _msg = "Request authorized"
    log.debug(_msg)
    return claims
