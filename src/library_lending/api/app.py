"""Library Lending REST API.

The app factory wires the route modules under the configured prefix and
translates the repository exception hierarchy into HTTP responses:

- NotFoundError -> 404
- ConflictError, DuplicateError -> 409
- AuthenticationError -> 401
- any other RepositoryException -> 500

Error bodies carry the message twice, as ``detail`` and as ``message``, so
both FastAPI-style clients and the dashboard can read it. Request validation
failures keep FastAPI's own 422 response.
"""

import logging
import sys

import logfire
import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..auth import AuthenticationError
from ..config import ServerConfig, get_config
from ..database.errors import ConflictError, DuplicateError, NotFoundError, RepositoryException
from ..database.session import DatabaseManager
from ..observability import initialize_observability, is_enabled
from .routes import auth, authors, books, borrow, users

logger = logging.getLogger(__name__)


def _error_body(message: str) -> dict[str, str]:
    return {"detail": message, "message": message}


def _error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=_error_body(message), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors onto HTTP status codes."""

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(status.HTTP_404_NOT_FOUND, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict_handler(_request: Request, exc: ConflictError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(DuplicateError)
    async def duplicate_handler(_request: Request, exc: DuplicateError) -> JSONResponse:
        return _error_response(status.HTTP_409_CONFLICT, str(exc))

    @app.exception_handler(AuthenticationError)
    async def authentication_handler(_request: Request, exc: AuthenticationError) -> JSONResponse:
        return _error_response(
            status.HTTP_401_UNAUTHORIZED, str(exc), headers={"WWW-Authenticate": "Bearer"}
        )

    @app.exception_handler(RepositoryException)
    async def repository_handler(_request: Request, exc: RepositoryException) -> JSONResponse:
        logger.error("Unhandled repository error: %s", exc)
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    @app.exception_handler(HTTPException)
    async def http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail), headers=exc.headers)


def create_app(
    config: ServerConfig | None = None,
    db_manager: DatabaseManager | None = None,
) -> FastAPI:
    """
    Build the REST application.

    Args:
        config: Settings to use; defaults to the process-wide configuration
        db_manager: Store handle; defaults to one built from ``config``
    """
    if config is None:
        config = get_config()
    if db_manager is None:
        db_manager = DatabaseManager(config.get_database_url())

    app = FastAPI(title="Library Lending API", version=config.server_version, debug=config.debug)
    app.state.config = config
    app.state.db_manager = db_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    if is_enabled():
        logfire.instrument_fastapi(app)

    for module in (auth, users, authors, books, borrow):
        app.include_router(module.router, prefix=config.api_prefix)

    @app.get(f"{config.api_prefix}/health", tags=["health"])
    def health() -> dict[str, str]:
        """Liveness plus a trivial round trip to the store."""
        database = "ok" if app.state.db_manager.verify_connection() else "unavailable"
        return {"status": "ok", "database": database}

    return app


def main() -> None:
    """Entry point for ``library-lending-api``."""
    config = get_config()

    logging.basicConfig(
        level=getattr(logging, config.effective_log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    logger.info("=" * 60)
    logger.info("Library Lending API")
    logger.info("Version: %s", config.server_version)
    logger.info("Listening on: http://%s:%d%s", config.api_host, config.api_port, config.api_prefix)
    logger.info("Debug Mode: %s", config.debug)
    logger.info("=" * 60)

    initialize_observability(config)
    db_manager = DatabaseManager(config.get_database_url())
    db_manager.init_database()

    try:
        uvicorn.run(
            create_app(config, db_manager),
            host=config.api_host,
            port=config.api_port,
            log_level=config.effective_log_level.lower(),
        )
    except KeyboardInterrupt:
        logger.info("API stopped by user")
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
