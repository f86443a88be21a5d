"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import alerts, analytics, jobs, portfolio, pricing
from config import settings
from database import init_db
from logging_config import setup_logging
from services.alert_engine import AlertEngine
from services.scheduler import JobScheduler
from services.snapshot_job import SnapshotJobRunner

setup_logging()
logger = logging.getLogger(__name__)

# Shared by the scheduler and the jobs API so their single-flight guards apply to both.
snapshot_runner = SnapshotJobRunner()
alert_engine = AlertEngine()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and start the job scheduler."""
    init_db()

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        try:
            scheduler = JobScheduler(snapshot_runner, alert_engine)
            scheduler.start()
        except Exception:
            logger.warning("Job scheduler failed to start", exc_info=True)
            scheduler = None
    else:
        logger.info("Job scheduler disabled")

    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.stop()


app = FastAPI(
    title="Cardfolio",
    description="Card price aggregation, portfolio valuation and price alerts",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.snapshot_runner = snapshot_runner
app.state.alert_engine = alert_engine

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(alerts.router)
app.include_router(analytics.router)
app.include_router(jobs.router)
app.include_router(portfolio.router)
app.include_router(pricing.router)


@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
