"""
webperf - FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webperf import __version__
from webperf.api.v1.endpoints import audit, health
from webperf.config import settings
from webperf.logger import logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    yield


# Create app
app = FastAPI(
    title=settings.APP_NAME,
    description="Web page audits for accessibility, performance, SEO, security, best practices and PWA",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
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

# Include routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(audit.router, prefix="/api/v1/audit")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.APP_NAME,
        "version": __version__,
        "docs": "/docs"
    }
