"""Main application entry point for Gateway Mirror."""

from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ApplicationConfig, load_config
from middleware import CorrelationMiddleware
from routers import (
    cache_router,
    gateways_router,
    health_router,
    metrics_router,
    register_exception_handlers,
    sync_router,
)
from services import CacheReader, GatewayClient, SyncOrchestrator
from storage import Database
from utils import configure_logging, get_logger


def init_app_state(
    app: FastAPI,
    config: ApplicationConfig,
    database: Database,
    executor: Optional[ThreadPoolExecutor] = None,
    client: Optional[GatewayClient] = None,
) -> None:
    """Attach the services request handlers resolve from ``app.state``."""
    orchestrator = SyncOrchestrator.build(config, database, client=client, executor=executor)
    app.state.config = config
    app.state.database = database
    app.state.orchestrator = orchestrator
    app.state.registry = orchestrator.registry
    app.state.cache_reader = CacheReader(database)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Open the cache, start the sync worker pool, and tear both down on exit."""
    config: ApplicationConfig = app.state.config
    configure_logging(config.log_level, json_output=config.log_json)
    logger = get_logger(__name__)

    # Syncs block on the network and on SQLite, so they run on a thread pool.
    executor = ThreadPoolExecutor(max_workers=config.sync_workers, thread_name_prefix="sync_worker")
    database = Database.from_config(config)

    try:
        database.create_schema()
        init_app_state(app, config, database, executor)
        logger.info("Gateway Mirror started", database_url=config.database_url)

        yield

    finally:
        logger.info("Shutting down services...")
        executor.shutdown(wait=True)
        database.dispose()
        logger.info("All services stopped successfully.")


def create_app(config: Optional[ApplicationConfig] = None, use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or load_config()
    app = FastAPI(
        title=config.app_name,
        description="Mirrors sessions, cron jobs, history and usage from remote gateways",
        version=config.app_version,
        lifespan=lifespan if use_lifespan else None,
    )
    app.state.config = config
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(gateways_router)
    app.include_router(sync_router)
    app.include_router(cache_router)
    app.include_router(metrics_router)
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=app.state.config.server_host, port=app.state.config.server_port)
