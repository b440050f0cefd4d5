from contextlib import asynccontextmanager
from textwrap import dedent
import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from database import DocumentStore, StoreUnavailableError, get_document_store, init_db
from notecode_api.errors import (
    ServiceError,
    handle_broad_exceptions,
    handle_http_exceptions,
    handle_request_validation_errors,
    handle_service_errors,
    handle_store_unavailable,
)
from notecode_api.routers.files import router as files_router
from notecode_api.routers.health import router as health_router
from notecode_api.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)


def create_store(settings: Settings) -> DocumentStore:
    """Build and initialize the document store for the configured deployment mode."""
    store = get_document_store(
        deployment_mode=settings.deployment_mode,
        db_path=settings.sqlite_db_path,
        mongodb_uri=settings.mongodb_uri,
        mongodb_database=settings.mongodb_database,
        timeout_ms=settings.store_timeout_ms,
    )
    return init_db(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    logger.info("closing document store")
    app.state.store.close()


def create_app(settings: Settings | None = None, store: DocumentStore | None = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="NoteCode API",
        summary="Store code snippets with their algorithm notes and sample runs",
        version="v1",
        description=dedent(
            """\
        Every route under the API prefix requires `Authorization: Bearer <token>`.

        | Status | Meaning |
        | --- | --- |
        | 400 | missing or malformed fields |
        | 401 | missing, malformed, expired or unknown credential |
        | 403 | the file belongs to someone else |
        | 404 | no such file |
        """
        ),
        docs_url="/docs",
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    if store is None:
        logger.info("creating document store")
        store = create_store(settings)
    app.state.store = store

    app.include_router(files_router, prefix=settings.api_prefix, tags=["files"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(ServiceError, handle_service_errors)
    app.add_exception_handler(StoreUnavailableError, handle_store_unavailable)
    app.add_exception_handler(RequestValidationError, handle_request_validation_errors)
    app.add_exception_handler(StarletteHTTPException, handle_http_exceptions)
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
