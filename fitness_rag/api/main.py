"""FastAPI application for the fitness knowledge base API."""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .. import __version__
from ..common.exception_handler import (
    format_exception_json,
    get_http_status_code,
    log_exception,
)
from ..common.exceptions import FitnessRAGError
from ..config import settings
from ..config.logging import setup_logging
from .deps import get_knowledge_base
from .routers import chat, health, knowledge

setup_logging(level=settings.log_level, log_file=settings.log_file, json_format=settings.log_json)
logger = logging.getLogger(__name__)

# Determine if we're in debug mode (shows full stack traces)
DEBUG_MODE = os.getenv("DEBUG", "false").lower() == "true"

# Create FastAPI app
app = FastAPI(
    title="Fitness Knowledge Base API",
    description=(
        "Workout, exercise form and nutrition answers grounded in crawled "
        "fitness articles via retrieval-augmented generation."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Local dev
        "http://localhost:5173",  # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(chat.router)
app.include_router(knowledge.router)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(FitnessRAGError)
async def fitness_rag_error_handler(request: Request, exc: FitnessRAGError) -> JSONResponse:
    """Handle all FitnessRAGError exceptions with structured JSON response.

    Args:
        request: The incoming request.
        exc: The FitnessRAGError exception.

    Returns:
        JSONResponse with structured error details.
    """
    log_exception(exc, extra_context={"path": str(request.url.path), "method": request.method})

    return JSONResponse(
        status_code=get_http_status_code(exc),
        content=exc.to_dict(include_trace=DEBUG_MODE),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all unhandled exceptions with structured JSON response."""
    log_exception(exc, extra_context={"path": str(request.url.path), "method": request.method})

    return JSONResponse(
        status_code=get_http_status_code(exc),
        content=format_exception_json(exc, include_trace=DEBUG_MODE),
    )


# =============================================================================
# Lifecycle Events
# =============================================================================


@app.on_event("startup")
async def startup_event():
    """Load or build the knowledge base on startup."""
    logger.info("Fitness Knowledge Base API starting up...")
    logger.info("API docs available at /docs")

    if not settings.initialize_on_startup:
        logger.info("Startup initialization disabled; call /api/v1/knowledge/rebuild to build")
        return

    result = await run_in_threadpool(get_knowledge_base().initialize)
    if result.success:
        logger.info(result.message)
    else:
        logger.error("Knowledge base unavailable: %s", result.message)


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup resources on shutdown."""
    get_knowledge_base().fetcher.close()
    logger.info("Fitness Knowledge Base API shutting down...")


# Export for uvicorn
__all__ = ["app"]
