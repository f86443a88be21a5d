"""Price alert API endpoints (owner-scoped)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from api.helpers import get_current_user_id
from database import get_db
from schemas.alert import PriceAlertCreate, PriceAlertPage, PriceAlertResponse, PriceAlertUpdate
from services.alert_service import AlertForbiddenError, AlertNotFoundError, AlertService
from utils.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, InvalidCursorError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])
service = AlertService()


def _get_owned_or_raise(db: Session, user_id: str, alert_id: str):
    try:
        return service.get_owned(db, user_id, alert_id)
    except AlertNotFoundError:
        raise HTTPException(status_code=404, detail="Alert not found")
    except AlertForbiddenError:
        raise HTTPException(status_code=403, detail="Not allowed to access this alert")


@router.post("", response_model=PriceAlertResponse, status_code=201)
def create_alert(
    data: PriceAlertCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Create a price alert for the current user."""
    alert = service.create(
        db,
        user_id,
        card_id=data.card_id,
        language=data.language,
        threshold_cents=data.threshold_cents,
        direction=data.direction,
    )
    db.commit()
    db.refresh(alert)
    return alert


@router.get("", response_model=PriceAlertPage)
def list_alerts(
    cursor: Optional[str] = None,
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    active: Optional[bool] = None,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    List the current user's alerts, newest first.

    Raises:
        HTTPException: 400 if the cursor is invalid
    """
    try:
        page = service.list_for_user(db, user_id, cursor=cursor, limit=limit, active=active)
    except InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PriceAlertPage(
        items=[PriceAlertResponse.model_validate(alert) for alert in page.items],
        next_cursor=page.next_cursor,
    )


@router.get("/{alert_id}", response_model=PriceAlertResponse)
def get_alert(
    alert_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Get one alert owned by the current user."""
    return _get_owned_or_raise(db, user_id, alert_id)


@router.patch("/{alert_id}", response_model=PriceAlertResponse)
def update_alert(
    alert_id: str,
    data: PriceAlertUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Update ``active`` and/or ``threshold_cents`` of an owned alert."""
    _get_owned_or_raise(db, user_id, alert_id)
    alert = service.update(
        db,
        user_id,
        alert_id,
        active=data.active,
        threshold_cents=data.threshold_cents,
    )
    db.commit()
    db.refresh(alert)
    return alert


@router.delete("/{alert_id}", status_code=204)
def delete_alert(
    alert_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Delete an owned alert."""
    _get_owned_or_raise(db, user_id, alert_id)
    service.delete(db, user_id, alert_id)
    db.commit()
