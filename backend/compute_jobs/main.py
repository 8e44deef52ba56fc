"""
Factorial Compute Job Service
Backend API - FastAPI Application
"""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from compute_jobs.api import configuration, jobs
from compute_jobs.core.config import settings
from compute_jobs.services.job_orchestrator import job_orchestrator

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Drain both job pools on shutdown"""
    logger.info("Compute job service starting")
    yield
    logger.info("Compute job service shutting down")
    job_orchestrator.shutdown(wait=True)


app = FastAPI(
    title="Factorial Compute Job API",
    description="Asynchronous factorial computation jobs",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(configuration.router, prefix=settings.API_V1_PREFIX, tags=["configuration"])
app.include_router(jobs.router, prefix=settings.API_V1_PREFIX, tags=["jobs"])


@app.get("/")
async def root():
    """Health check endpoint"""
    return {"status": "ok", "service": "Factorial Compute Job API"}


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "healthy"}


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "field": None
        }
    )
