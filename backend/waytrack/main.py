"""Waytrack Archive — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from waytrack.config import Settings, settings
from waytrack.api import health, users
from waytrack.clients.base import IDocumentStore
from waytrack.exceptions import StoreError, DuplicateUsernameError, UnknownCategoryError

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> Optional[IDocumentStore]:
    """Instantiate the configured document store backend, if any."""
    if settings.uses_sql_store:
        from waytrack.clients.sql_store import SqlDocumentStore
        from waytrack.database import build_engine

        return SqlDocumentStore(build_engine(settings.database_url, echo=settings.debug))

    if settings.has_firestore:
        from waytrack.clients.firestore import FirestoreClient

        return FirestoreClient(
            settings.firestore_project_id,
            api_key=settings.firestore_api_key,
            database=settings.firestore_database,
            page_size=settings.firestore_page_size,
        )

    logger.warning("No document store configured; archive endpoints will return 503")
    return None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup: build the store, wire services, probe the backend
    from waytrack.database import init_db
    from waytrack.services.archive import ArchiveService
    from waytrack.services.integration_probe import probe_all
    from waytrack.services.user_resolver import UserResolver

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = build_store(settings)
    if store is not None:
        if settings.uses_sql_store:
            await init_db(store.engine)
        resolver = UserResolver(
            store,
            settings.users_collection,
            cache_ttl_seconds=settings.resolver_cache_ttl_seconds,
        )
        app.state.archive = ArchiveService(
            store,
            resolver,
            settings.entries_collection,
            preview_limit=settings.profile_preview_limit,
            default_timezone=settings.display_timezone,
        )
    app.state.integrations = await probe_all(settings, store)
    yield
    # Shutdown: release store resources
    if store is not None:
        await store.close()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Read-only profiles and media archives",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.debug else None,
    redoc_url="/api/redoc" if settings.debug else None,
)

# CORS — allow frontend dev server + production URL
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",     # Vite dev server
        "http://localhost:3000",     # CRA dev server
        settings.app_url,
    ],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# ── Error mapping ────────────────────────────────────────────────

@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"Store failure on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=503, content={"detail": "Error connecting to database"})


@app.exception_handler(DuplicateUsernameError)
async def duplicate_username_handler(request: Request, exc: DuplicateUsernameError):
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc), "username": exc.username, "user_ids": exc.user_ids},
    )


@app.exception_handler(UnknownCategoryError)
async def unknown_category_handler(request: Request, exc: UnknownCategoryError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


# ── Mount routers ────────────────────────────────────────────────
app.include_router(health.router, prefix="/api/v1", tags=["system"])
app.include_router(users.router,  prefix="/api/v1", tags=["users"])


def run():
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("waytrack.main:app", host=settings.host, port=settings.port, log_level=settings.log_level)
