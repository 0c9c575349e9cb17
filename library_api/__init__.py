# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.middleware.authentication import AuthenticationMiddleware

from library_api.auth import AuthBackend, on_auth_error
from library_api.logging import logger
from library_api.managers.cache_manager import create_cache_manager
from library_api.middlewares.correlation_id import CorrelationIDMiddleware
from library_api.middlewares.logging_context import LoggingContextMiddleware
from library_api.routing import collect_subrouters
from library_api.settings import app_settings
from library_api.storage.db import (
    async_session,
    create_db_and_tables,
    wait_and_init_db,
)
from library_api.exceptions import AppException
from library_api.utils.error_handler import (
    app_exception_handler,
    request_validation_exception_handler,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application startup and shutdown.

    Startup waits for the database and, in development setups, creates the
    tables and loads the demo fixtures. Shutdown closes the Redis pools.
    """
    logger.info("Application startup initiated")
    await wait_and_init_db()

    if app_settings.DB_CREATE_TABLES:
        await create_db_and_tables()

    if app_settings.LOAD_FIXTURES:
        from library_api.storage.fixtures import load_fixtures

        async with async_session() as session:
            await load_fixtures(session)

    yield

    logger.info("Application shutdown initiated")
    if app_settings.CACHE_BACKEND == "redis":
        from library_api.storage.redis import RedisPool

        await RedisPool.close_all()
    logger.info("Application shutdown complete")


def application() -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    - Routers are collected from ``library_api/api/http``.
    - The response cache is created once and stored on ``app.state.cache``.
    - Query/path parameter errors are answered with 400.
    - Middlewares: correlation ids, authentication (Keycloak bearer tokens
      or local basic credentials), logging context.

    Role-based permissions are enforced via FastAPI dependencies
    (``require_admin``) on the write endpoints.
    """
    app = FastAPI(
        title="Library catalog API",
        description="Authors and books with a tag-invalidated response cache",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.cache = create_cache_manager()

    app.include_router(collect_subrouters())

    app.add_exception_handler(
        RequestValidationError, request_validation_exception_handler
    )
    app.add_exception_handler(AppException, app_exception_handler)

    # Middlewares (execute in REVERSE order of registration)
    # Execution flow: CorrelationIDMiddleware → AuthenticationMiddleware → LoggingContextMiddleware
    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(
        AuthenticationMiddleware, backend=AuthBackend(), on_error=on_auth_error
    )
    app.add_middleware(CorrelationIDMiddleware)

    return app


app = application()  # Need for fastapi cli
