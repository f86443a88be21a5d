"""API route handlers."""
from . import alerts, analytics, jobs, portfolio, pricing

__all__ = ["alerts", "analytics", "jobs", "portfolio", "pricing"]
