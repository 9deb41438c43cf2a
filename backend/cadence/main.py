"""
Cadence - critical path scheduling engine for project task graphs.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager

from cadence.database import init_db
from cadence.routes import schedule
from cadence.exceptions import register_exception_handlers
from cadence.logging_config import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Cadence API...")
    await init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down Cadence API...")


app = FastAPI(
    title="Cadence",
    description="Critical path scheduling for project task graphs",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(schedule.router, prefix="/projects", tags=["Schedule"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
