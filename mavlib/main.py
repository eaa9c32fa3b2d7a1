"""Main FastAPI application."""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mavlib.api.auth_routes import router as auth_router
from mavlib.api.loan_routes import router as loans_router
from mavlib.api.routes import router as books_router
from mavlib.api.search_routes import router as search_router
from mavlib.api.stats_routes import router as stats_router
from mavlib.core.config import Settings, get_settings
from mavlib.core.dependencies import LibraryContainer, build_container
from mavlib.domain.entities import CatalogState
from mavlib.infrastructure.sessions.redis_store import RedisSessionStore
from mavlib.services.background_tasks import load_catalog_task, overdue_sweep_loop

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    container: LibraryContainer = app.state.container
    logger.info("Starting MAV Library application")

    tasks = []
    if container.catalog_service.state is CatalogState.LOADING:
        tasks.append(asyncio.create_task(
            load_catalog_task(container.catalog_service, container.catalog_supplier)
        ))
    tasks.append(asyncio.create_task(
        overdue_sweep_loop(container.ledger, container.settings.overdue_sweep_interval_seconds)
    ))
    yield

    logger.info("Shutting down MAV Library application")
    for task in tasks:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
    if isinstance(container.session_store, RedisSessionStore):
        await container.session_store.close()


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[LibraryContainer] = None,
) -> FastAPI:
    app = FastAPI(
        title="MAV Library",
        description="Library catalog, lending tracker and global search",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container or build_container(settings or get_settings())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(books_router)
    app.include_router(loans_router)
    app.include_router(search_router)
    app.include_router(stats_router)

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        state = request.app.state.container.catalog_service.state
        return {"status": "healthy", "catalog": state.value}

    return app


app = create_app()
