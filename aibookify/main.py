"""
AIBookify Backend - FastAPI Application
LLM Provider:
- If OPENAI_API_KEY is set: use OpenAI
- If no OPENAI_API_KEY: use Ollama (llama3.2)
"""

import asyncio
import sys
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from pymongo.database import Database
from pymongo.errors import PyMongoError

from .config import settings
from .exceptions import BookifyError
from .interfaces import ContextStore, ensure_indexes, get_context_store, get_database, ping_database
from .interfaces.database import close_client
from .llm import get_llm_client
from .api.chat import router as chat_router
from .api.dashboard import router as dashboard_router
from .api.listings import router as listings_router
from .api.websocket import router as websocket_router
from .api.dependencies import get_image_client
from .services import ImageClient, PlacesClient


SERVICE_NAME = "AIBookify Backend"
SERVICE_VERSION = "1.0.0"


def configure_logging():
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL.upper())


async def context_cleanup_loop(store: ContextStore, interval_seconds: int):
    """Periodically drop idle in-memory conversation contexts"""
    while True:
        await asyncio.sleep(interval_seconds)
        store.cleanup_old_contexts()


# ============================================
# Application Lifespan
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    configure_logging()
    logger.info("=" * 50)
    logger.info(f"Starting {SERVICE_NAME}")
    logger.info("=" * 50)
    logger.info(f"Environment: {settings.API_ENV}")

    llm = get_llm_client()
    logger.info(f"LLM Provider: {llm.provider} ({llm.model})")

    try:
        ensure_indexes(get_database())
    except PyMongoError as e:
        logger.warning(f"Could not ensure MongoDB indexes: {e}")

    store = get_context_store()
    logger.info(f"Context store backend: {store.backend}")
    cleanup_task = asyncio.create_task(
        context_cleanup_loop(store, settings.CONTEXT_CLEANUP_INTERVAL)
    )

    yield

    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        pass
    close_client()
    logger.info(f"{SERVICE_NAME} shutdown complete")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title=SERVICE_NAME,
    description="Hotel booking platform with an AI concierge, hotel chat rooms and a manager dashboard. Supports OpenAI and Ollama.",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(listings_router)
app.include_router(chat_router)
app.include_router(dashboard_router)
app.include_router(websocket_router)


# ============================================
# Error Handlers
# ============================================

@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"Database error on {request.url.path}: {exc}")
    content = {"detail": "Database error occurred"}
    if settings.is_development:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.exception_handler(BookifyError)
async def bookify_error_handler(request: Request, exc: BookifyError):
    logger.error(f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc) or "Internal server error"})


# ============================================
# REST Endpoints
# ============================================

@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "docs": "/docs",
        "endpoints": [
            "/api/health",
            "/api/listings",
            "/api/chat/smart-chat",
            "/api/chat/generate-response",
            "/api/dashboard/overview",
            "/api/chat/ws"
        ]
    }


@app.get("/api/health")
async def health_check(
    db: Database = Depends(get_database),
    store: ContextStore = Depends(get_context_store),
    images: ImageClient = Depends(get_image_client)
):
    """Detailed health check"""
    llm = get_llm_client()
    mongo_ok = ping_database(db)

    return {
        "status": "healthy" if mongo_ok else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.API_ENV,
        "components": {
            "mongodb": "connected" if mongo_ok else "unavailable",
            "context_store": store.backend,
            "llm": {"provider": llm.provider, "model": llm.model},
            "places": "configured" if PlacesClient().configured else "not configured",
            "images": "configured" if images.configured else "not configured",
        }
    }


# ============================================
# Main
# ============================================

def run():
    import uvicorn
    uvicorn.run(
        "aibookify.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development
    )


if __name__ == "__main__":
    run()
