"""DuoReport — FastAPI Application Entry Point.

Daily Meta + TikTok ad performance, reconciled into one table.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from duoreport.api.chat_routes import router as chat_router
from duoreport.api.data_routes import router as data_router
from duoreport.api.source_routes import router as source_router
from duoreport.config import settings
from duoreport.core.logging import get_logger

logger = get_logger("main")

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 DuoReport starting up...")
    logger.info(
        f"Meta configured: {settings.meta_configured}, "
        f"TikTok configured: {settings.tiktok_configured}"
    )
    if not settings.credentials_complete:
        logger.warning(
            f"❌ Missing credentials: {', '.join(settings.missing_credentials())} "
            "— /api/live-data will return 503"
        )
    yield
    logger.info("DuoReport shut down")


app = FastAPI(
    title="DuoReport",
    description="Pull daily Meta and TikTok ad data, reconcile it into one gap-free table with derived efficiency metrics, and ask an AI strategist about it.",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(data_router)
app.include_router(chat_router)
app.include_router(source_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "duoreport",
        "version": VERSION,
    }
