import logging
from datetime import timedelta

import click
from pydantic import ValidationError

from resume_api.app.core.config import get_settings
from resume_api.app.core.security import create_access_token

log = logging.getLogger(__name__)


@click.group()
def cli():
    """Management script for the Resume Aggregation API."""
    pass


@cli.command("serve")
@click.option("--host", default=None, help="Interface to bind. Defaults to SERVER_HOST.")
@click.option("--port", default=None, type=int, help="Port to bind. Defaults to SERVER_PORT.")
@click.option("--reload", is_flag=True, help="Restart the server when code changes.")
def serve(host: str | None, port: int | None, reload: bool):
    """
    Run the API server under uvicorn.

    Args:
        host (str | None): The interface to bind, overriding the settings.
        port (int | None): The port to bind, overriding the settings.
        reload (bool): Whether to enable uvicorn's auto-reload.

    Returns:
        None

    Notes:
        1. Loads settings so an invalid configuration fails before the port is bound.
        2. Configures logging from LOG_LEVEL.
        3. Starts uvicorn with the application import string.

    """
    import uvicorn

    from resume_api.app.main import configure_logging

    settings = get_settings()
    configure_logging(settings.log_level)
    bind_host = host if host is not None else settings.host
    bind_port = port if port is not None else settings.port
    _msg = f"Starting server on {bind_host}:{bind_port}"
    log.info(_msg)
    uvicorn.run(
        "resume_api.app.main:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
    )


@cli.command("create-token")
@click.option("--subject", required=True, help="Value of the token's 'sub' claim.")
@click.option(
    "--expires-minutes",
    default=60,
    show_default=True,
    type=int,
    help="Token lifetime in minutes. Use 0 for a token without an 'exp' claim.",
)
def create_token(subject: str, expires_minutes: int):
    """
    Print a signed token for the Authorization header.

    Args:
        subject (str): The "sub" claim of the token.
        expires_minutes (int): Lifetime of the token; 0 disables expiry.

    Returns:
        None

    Notes:
        1. Signs with the configured secret and algorithm.
        2. Prints the token prefixed with "jwt " as the header expects.

    """
    _msg = "create_token starting"
    log.debug(_msg)
    settings = get_settings()
    expires_delta = timedelta(minutes=expires_minutes) if expires_minutes > 0 else None
    token = create_access_token(
        data={"sub": subject},
        settings=settings,
        expires_delta=expires_delta,
    )
    click.echo(f"jwt {token}")
    _msg = "create_token returning"
    log.debug(_msg)


@cli.command("check-config")
def check_config():
    """
    Validate the configuration and print the resolved, non-secret values.

    Returns:
        None

    Notes:
        1. Loads settings from the environment and .env file.
        2. On a validation error, prints it and exits with status 1.
        3. The JWT secret and database password are never printed.

    """
    try:
        settings = get_settings()
    except ValidationError as e:
        _error_msg = f"Invalid configuration: {e}"
        click.echo(_error_msg, err=True)
        log.error(_error_msg)
        raise SystemExit(1)

    click.echo(f"JWT algorithm: {settings.jwt_algorithm.value}")
    click.echo(f"Database: {settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}")
    click.echo(f"Pool size: {settings.pool_size}")
    click.echo(f"Pool timeout: {settings.pool_timeout}s")
    click.echo(f"Query timeout: {settings.query_timeout}s")
    click.echo(f"Listen: {settings.host}:{settings.port}")


def main():
    """Run the command line interface."""
    cli()


if __name__ == "__main__":
    main()
