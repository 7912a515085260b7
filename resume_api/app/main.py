import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from resume_api.app.api.routes.resumes import router as resumes_router
from resume_api.app.core.config import get_settings
from resume_api.app.core.exceptions import ResumeApiError
from resume_api.app.database.database import create_db_engine, dispose_engine

log = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the connection pool on startup and drain it on shutdown.

    Args:
        app (FastAPI): The application whose state receives the engine.

    Notes:
        1. Load settings; a missing or non-allow-listed JWT algorithm fails startup here.
        2. Create the single process-wide engine and store it on `app.state`.
        3. On shutdown, dispose the engine so every pooled connection is closed.

    """
    settings = get_settings()
    app.state.engine = create_db_engine(settings)
    app.state.query_timeout = settings.query_timeout
    _msg = "Database engine ready"
    log.info(_msg)
    try:
        yield
    finally:
        await dispose_engine(app.state.engine)
        _msg = "Database engine disposed"
        log.info(_msg)


async def resume_api_error_handler(request: Request, exc: ResumeApiError) -> JSONResponse:
    """Render a `ResumeApiError` as `{"error": message}` with its status code."""
    _msg = f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}"
    log.debug(_msg)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render any unexpected failure as a generic JSON 500.

    Starlette runs this handler outside the HTTP middleware stack, so the
    X-Powered-By header is set here as well.
    """
    _msg = f"Unhandled error serving {request.method} {request.url.path}"
    log.exception(_msg)
    return JSONResponse(
        status_code=500,
        content=ResumeApiError().to_dict(),
        headers={"X-Powered-By": get_settings().powered_by},
    )


async def powered_by_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Add the X-Powered-By header to every response."""
    response = await call_next(request)
    response.headers["X-Powered-By"] = get_settings().powered_by
    return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        None

    Returns:
        FastAPI: The configured FastAPI application instance.

    Notes:
        1. Initialize the FastAPI application with the lifespan that owns the engine.
        2. Add the middleware stamping X-Powered-By on every response.
        3. Register the handler mapping `ResumeApiError` subclasses to JSON error bodies,
           and a catch-all handler answering any other failure with a generic JSON 500.
        4. Define a health check endpoint at "/health" that returns {"status": "ok"}.
        5. Include the resume aggregation router.

    """
    _msg = "Creating FastAPI application"
    log.debug(_msg)

    app = FastAPI(title="Resume Aggregation API", lifespan=lifespan)

    app.middleware("http")(powered_by_middleware)
    app.add_exception_handler(ResumeApiError, resume_api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    app.include_router(resumes_router)

    _msg = "FastAPI application created successfully"
    log.debug(_msg)
    return app


app = create_app()


def main() -> None:
    """Run the application with uvicorn.

    Notes:
        1. Load and validate settings before binding the port.
        2. Configure logging from the LOG_LEVEL setting.
        3. Serve on the configured host and port.

    """
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
