#!/usr/bin/env python3
"""
Main entry point for the short link service.

Concurrency: one asyncio task per request (FastAPI + uvicorn). QR generation
is single-flight per identifier within a process; with WORKERS > 1 each
process has its own flight table.

Usage:
    python app.py

Environment variables:
    STORAGE_BACKEND - memory (default) or questdb
    QUESTDB_URL - QuestDB connection URL
    QUESTDB_CREATE_TABLES - Create tables on first connection
    REDIS_URL - Redis URL for QR artifacts and link cache (optional)
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    WORKERS - Number of uvicorn worker processes (default 1)
    LOG_LEVEL - Logging level
"""

import logging
import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import Config, load_config
from shortlink.common.logging_config import setup_logging
from shortlink.qr import QrEncoder
from shortlink.qr_service import QrIssuanceService
from shortlink.resolution import LinkResolutionService, RedirectPolicy
from shortlink.service import ShortLinkService
from shortlink.shortcode import IdentifierGenerator
from shortlink.storage import (
    InMemoryClickRecorder,
    InMemoryQrArtifactStore,
    InMemoryShortLinkStore,
    QuestDBClickRecorder,
    QuestDBClient,
    QuestDBShortLinkStore,
    RedisLinkCache,
    RedisQrArtifactStore,
)
from web_app import create_app


async def build_service(config: Config, logger: logging.Logger) -> ShortLinkService:
    """Wire stores and services from configuration."""
    if config.storage_backend == "questdb":
        logger.info(f"Using QuestDB at {config.questdb_url}")
        client = QuestDBClient(
            db_config=config.questdb_url,
            create_tables=config.questdb_create_tables,
            logger=logger,
        )
        links = QuestDBShortLinkStore(client, logger=logger)
        clicks = QuestDBClickRecorder(client, logger=logger)
    else:
        logger.info("Using in-memory short link store")
        links = InMemoryShortLinkStore(logger=logger)
        clicks = InMemoryClickRecorder()

    cache = None
    if config.redis_url:
        logger.info(f"Connecting to Redis at {config.redis_url}")
        artifacts = RedisQrArtifactStore(config.redis_url, logger=logger)
        await artifacts.connect()
        cache = RedisLinkCache(
            redis_url=config.redis_url,
            ttl_seconds=config.cache_ttl_seconds,
            logger=logger,
        )
        await cache.connect()
    else:
        logger.info("Redis disabled, QR codes kept in memory")
        artifacts = InMemoryQrArtifactStore()

    resolver = LinkResolutionService(
        links,
        policy=RedirectPolicy.from_statuses(
            config.safe_redirect_status, config.unsafe_redirect_status
        ),
        cache=cache,
        logger=logger,
    )
    qr = QrIssuanceService(
        links,
        artifacts,
        encoder=QrEncoder(
            box_size=config.qr_box_size,
            border=config.qr_border,
            error_correction=config.qr_error_correction,
        ),
        wait_timeout_seconds=config.qr_wait_timeout_seconds,
        logger=logger,
    )

    return ShortLinkService(
        links=links,
        artifacts=artifacts,
        clicks=clicks,
        resolver=resolver,
        qr=qr,
        identifier_generator=IdentifierGenerator(default_length=config.identifier_length),
        logger=logger,
        enable_custom_identifiers=config.enable_custom_identifiers,
        max_collision_retries=config.max_collision_retries,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting short link service...")
    app.state.service = await build_service(config, logger)
    logger.info("Service started successfully")

    yield

    logger.info("Shutting down short link service...")
    await app.state.service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Short Link Service")
    logger.info(f"Configuration: {config.model_dump()}")

    app = create_app(service_instance=None, config=config)
    app.state.logger = logger
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

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
