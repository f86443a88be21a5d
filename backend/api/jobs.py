"""One-shot triggers for the batch jobs."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.helpers import get_alert_engine, get_snapshot_runner
from database import get_db
from schemas.job import AlertJobSummary, SnapshotJobSummary
from services.alert_engine import AlertEngine
from services.snapshot_job import SnapshotJobRunner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/jobs", tags=["jobs"])


@router.post("/snapshot/run", response_model=SnapshotJobSummary)
async def run_snapshot_job(
    db: Session = Depends(get_db),
    runner: SnapshotJobRunner = Depends(get_snapshot_runner),
):
    """Run the daily price snapshot job now.

    Raises:
        HTTPException:
            - 409 Conflict: The job is already running
            - 500 Internal Server Error: The run aborted
    """
    if runner.is_running:
        raise HTTPException(status_code=409, detail="Snapshot job already in progress")
    try:
        return await runner.run(db=db)
    except Exception:
        logger.error("Manual snapshot job run failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Snapshot job failed")


@router.post("/alerts/run", response_model=AlertJobSummary)
async def run_alert_check(
    db: Session = Depends(get_db),
    engine: AlertEngine = Depends(get_alert_engine),
):
    """Evaluate all active price alerts now.

    Raises:
        HTTPException:
            - 409 Conflict: The check is already running
            - 500 Internal Server Error: The run aborted
    """
    if engine.is_running:
        raise HTTPException(status_code=409, detail="Alert check already in progress")
    try:
        return await engine.run(db=db)
    except Exception:
        logger.error("Manual alert check failed", exc_info=True)
        raise HTTPException(status_code=500, detail="Alert check failed")
