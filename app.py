#!/usr/bin/env python3
"""
Main entry point for the BrandLink service.

Concurrency: The server handles multiple connections simultaneously via async I/O
(FastAPI + asyncpg connection pool). Set WORKERS > 1 for multi-process scaling
across CPU cores (each worker has its own DB pool).

Usage:
    python app.py

Environment variables:
    DATABASE_URL - PostgreSQL connection URL (requests get 503 when unset)
    DB_CREATE_TABLES - Set to '1' to create tables on startup
    LEGACY_RESPONSE_SHAPE - Set to '1' for the minimal single-link payload
    PRO_PRICE_IDS - Comma-separated price ids with unlimited links
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from brandlink.database.postgres import BrandLinkPostgres
from brandlink.errors import StorageUnavailableError
from brandlink.service import BrandLinkService
from brandlink.common.logging_config import setup_logging
from web_app import create_app


# Global instances for graceful shutdown
db_instance = None
service_instance = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global db_instance, service_instance

    config = app.state.config
    logger = app.state.logger

    logger.info("Starting BrandLink service...")

    if not config.database_url:
        logger.warning("DATABASE_URL is not set; link requests will return 503")
    else:
        db_instance = BrandLinkPostgres(
            db_config=config.database_url,
            pool_max_size=config.db_pool_max_size,
            connection_timeout_seconds=config.db_timeout_seconds,
            create_tables=config.db_create_tables,
            logger=logger,
        )
        logger.info(f"Connecting to PostgreSQL at {db_instance.host}:{db_instance.port}/{db_instance.database}")

        # An unreachable database is not fatal; requests retry and get 503 meanwhile
        try:
            await db_instance.connect()
        except StorageUnavailableError as e:
            logger.error(f"Database not reachable at startup: {e}")

        service_instance = BrandLinkService(
            db=db_instance,
            logger=logger,
            legacy_response_shape=config.legacy_response_shape,
            pro_price_ids=config.pro_price_id_list,
            free_plan_link_limit=config.free_plan_link_limit,
            analytics_default_days=config.analytics_default_days,
            analytics_max_days=config.analytics_max_days,
        )

    # Update app state
    app.state.db = db_instance
    app.state.service = service_instance

    logger.info("Service started successfully")

    # Yield control to the application
    yield

    # Shutdown
    logger.info("Shutting down BrandLink service...")

    if service_instance:
        await service_instance.close()

    logger.info("Service stopped")


def main():
    """Main entry point."""
    # Load configuration
    config = load_config()

    # Setup logging
    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("BrandLink Service")
    logger.info(f"Configuration: {config.safe_dump()}")

    # Create FastAPI app with lifespan
    app = create_app(
        db_instance=None,  # Will be set in lifespan
        service_instance=None,
        config=config,
    )

    # Store config and logger in app state
    app.state.config = config
    app.state.logger = logger

    # Override lifespan
    app.router.lifespan_context = lifespan

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        workers=config.workers,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    # Setup signal handlers for graceful shutdown
    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    # Run server
    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
