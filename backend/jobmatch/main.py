"""
FastAPI application entry point for JobMatch.

This is the main app that:
- Initializes FastAPI with CORS
- Registers all API routers
- Provides health check endpoint
- Disposes the database engine on shutdown
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobmatch.config import settings
from jobmatch import database
# Import API routers
from jobmatch.api import jobs, matches, notifications, sync, webhooks

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("🚀 Starting JobMatch API...")
    logger.info(f"📊 Database: {settings.database_url.split('@')[1] if '@' in settings.database_url else 'configured'}")
    logger.info(f"📧 Email mode: {settings.email_mode}")
    if not settings.airtable_token or not settings.airtable_base_id:
        logger.warning("Airtable is not configured, job sync will fail until it is")

    yield

    # Shutdown
    logger.info("👋 Shutting down JobMatch API...")
    await database.engine.dispose()


# Initialize FastAPI app
app = FastAPI(
    title="JobMatch API",
    description="Airtable job sync, job matching and match notifications",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Configure CORS
# Set ALLOWED_ORIGINS environment variable with comma-separated domains
allowed_origins = [
    "http://localhost:3000",  # Local development
]

if settings.allowed_origins:
    allowed_origins.extend(origin.strip() for origin in settings.allowed_origins.split(','))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {
        "status": "healthy",
        "service": "JobMatch API",
        "version": "1.0.0",
    }


# Root endpoint
@app.get("/")
async def root():
    """API root with basic info."""
    return {
        "message": "JobMatch API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
    }


# Register API routers
# sync before jobs so /api/jobs/sync is not captured by /api/jobs/{job_id}
app.include_router(sync.router, prefix="/api", tags=["sync"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(matches.router, prefix="/api/matches", tags=["matches"])
app.include_router(notifications.router, prefix="/api", tags=["notifications"])
app.include_router(webhooks.router, prefix="/api/webhooks", tags=["webhooks"])
