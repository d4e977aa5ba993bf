# Main application entry point

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from src.config.settings import get_settings
from src.api.routes import router
from src.common.logging_config import setup_logging
from src.common.metrics import get_metrics, get_metrics_content_type
from src.common.middleware import RequestTrackingMiddleware

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging on startup."""
    setup_logging(settings.log_level, json_format=settings.log_json)
    logger.info("JSON conversion service started")
    yield
    logger.info("JSON conversion service stopped")


app = FastAPI(
    title="JSON Schema Converter API",
    description="Analyze JSON and convert it to relational and document models",
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(RequestTrackingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "JSON Schema Converter API",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs"
    }


@app.get("/health")
async def health():
    """Health check endpoint (alias for /live)"""
    return {"status": "healthy"}


@app.get("/live")
async def liveness():
    """Liveness check endpoint"""
    return {"status": "alive"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint"""
    if not settings.metrics_enabled:
        raise HTTPException(status_code=404, detail="Metrics disabled")
    return Response(content=get_metrics(), media_type=get_metrics_content_type())


if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.debug
    )
