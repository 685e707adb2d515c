import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logfire

from vetcare.config import settings
from vetcare.database import init_db, close_db
from vetcare.api import api_router

logging.basicConfig(level=logging.DEBUG if settings.debug else logging.INFO)
logger = logging.getLogger(__name__)

# Initialize Logfire - instruments FastAPI and httpx (calendar API calls)
if settings.logfire_token:
    logfire.configure(
        token=settings.logfire_token,
        service_name="vetcare-scheduling",
        environment=settings.app_env,
        console=False,
    )
    logfire.instrument_httpx()
    logger.info("Logfire initialized")
else:
    logger.warning("Logfire token not set - observability disabled")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting %s...", settings.app_name)
    await init_db()
    logger.info("Database initialized")

    yield

    # Shutdown
    await close_db()
    logger.info("Database connections closed")


app = FastAPI(
    title=settings.app_name,
    description="Veterinary appointment scheduling",
    version="1.0.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
if settings.logfire_token:
    logfire.instrument_fastapi(app)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": "1.0.0",
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected",
        "email": "configured" if settings.resend_api_key else "not_configured",
        "calendar": "configured" if settings.google_client_id else "not_configured",
    }
