"""
FastAPI application entry point.
"""
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from loguru import logger

from votechain.core.config import settings
from votechain.core.database import init_db, close_db
from votechain.core.logging import setup_logging
from votechain.ledger.ledger_client import LedgerClient
from votechain.api.v1.router import api_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler for startup and shutdown."""
    # Startup
    await init_db()
    app.state.ledger = LedgerClient.from_settings(settings)
    if app.state.ledger.is_available():
        logger.info("Ledger anchoring enabled on {}", settings.LEDGER_NETWORK)
    else:
        logger.warning("Ledger not configured, votes will be stored unanchored")
    yield
    # Shutdown
    await app.state.ledger.close()
    await close_db()


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
        VoteChain Vote Integrity API

        Stores votes with a content fingerprint and anchors each fingerprint
        on an EVM ledger so tampering can be detected later.

        ## Key Features
        - Election rule enforcement (voting window, registration, single choice)
        - Double-voting prevention per voter email
        - Best-effort ledger anchoring with later sync
        - Per-vote integrity checks and election audit reports
        """,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url=f"{settings.API_V1_PREFIX}/docs",
        redoc_url=f"{settings.API_V1_PREFIX}/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Gzip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Include API router
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.APP_VERSION}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": f"{settings.API_V1_PREFIX}/docs"
        }

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "votechain.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS if not settings.DEBUG else 1,
    )
