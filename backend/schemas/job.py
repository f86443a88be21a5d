"""Pydantic schemas for batch job summaries."""

from pydantic import BaseModel


class SnapshotJobSummary(BaseModel):
    """Counts returned by the price snapshot job."""

    success: int = 0
    skipped: int = 0
    failed: int = 0
    total: int = 0


class AlertJobSummary(BaseModel):
    """Counts returned by the price alert check."""

    triggered: int = 0
    skipped: int = 0
    no_data: int = 0
    total: int = 0
