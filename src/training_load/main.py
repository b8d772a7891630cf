"""FastAPI application for the Training Load engine."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, get_settings
from .api.routes import load, scores, zones
from .api.exception_handlers import register_exception_handlers

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(f"Starting Training Load API v{__version__}")
    logger.info(f"Database: {settings.db_path}")
    yield
    logger.info("Shutting down Training Load API")


app = FastAPI(
    title="Training Load API",
    description="Training stress, fitness/fatigue/form, zones and composite scores",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(zones.router, prefix="/api/v1", tags=["zones"])
app.include_router(load.router, prefix="/api/v1", tags=["load"])
app.include_router(scores.router, prefix="/api/v1", tags=["scores"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Training Load API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Run the API with uvicorn using configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
