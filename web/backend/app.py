#!/usr/bin/env python3
"""
SkillSwap API - FastAPI Application

Partner matching and time-credit banking over HTTP.

Usage:
    python main.py serve

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
    - http://localhost:8080/redoc - Alternative API Documentation
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException

from core.config_loader import AppConfig
from core.ledger import TimeBankingService
from database.database import Database
from .config import get_config
from .exceptions import (
    ServiceException,
    service_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from .routers import matching_router, timebanking_router

logger = logging.getLogger(__name__)


def create_app(config: Optional[AppConfig] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Application config (defaults to get_config()).
        database: Pre-built Database. When omitted, the lifespan creates one
            from config.database.url and disposes it on shutdown.
    """
    config = config or get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.database is None
        if owned:
            app.state.database = Database(config.database.url)
        app.state.time_banking_service = TimeBankingService(app.state.database, config=config.ledger)
        logger.info("SkillSwap API started")
        try:
            yield
        finally:
            if owned:
                app.state.database.dispose()
                app.state.database = None

    app = FastAPI(
        title="SkillSwap API",
        description="Skill-exchange partner matching and time-credit ledger",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.config = config
    app.state.database = database

    # Register exception handlers
    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(matching_router)
    app.include_router(timebanking_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "skillswap-api"}

    return app


app = create_app()


def main():
    """Run the web server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    config = get_config()

    logger.info(f"Starting SkillSwap API on {config.web.host}:{config.web.port}")
    logger.info(f"API Docs: http://{config.web.host}:{config.web.port}/docs")

    uvicorn.run(
        "web.backend.app:app",
        host=config.web.host,
        port=config.web.port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
