# app/routers/alerts.py
"""Operational alerts (booking ledger faults) — list + resolve, fleet admins only."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import Optional
from app.auth import require_fleet_admin
from app.database import get_db
from app.models.alert import Alert
from app.schemas.alert import AlertOut
from app.services.alert_service import resolve_alert
from app.services.role_service import Caller

router = APIRouter()


@router.get("/alerts", response_model=list[AlertOut], summary="All alerts — filterable by type")
def get_all_alerts(
    alert_type: Optional[str] = None,
    is_resolved: Optional[int] = None,
    vehicle_id: Optional[str] = None,
    limit: int = 50,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_fleet_admin),
):
    """Filter by alert_type, is_resolved (0 or 1) or vehicle_id. Newest first."""
    q = db.query(Alert)
    if alert_type:
        q = q.filter(Alert.alert_type == alert_type)
    if is_resolved is not None:
        q = q.filter(Alert.is_resolved == is_resolved)
    if vehicle_id:
        q = q.filter(Alert.vehicle_id == vehicle_id)
    return q.order_by(Alert.triggered_at.desc()).limit(limit).all()


@router.put("/alerts/{alert_id}/resolve", summary="Resolve an alert")
def resolve(alert_id: int, db: Session = Depends(get_db),
            caller: Caller = Depends(require_fleet_admin)):
    alert = db.query(Alert).filter(Alert.id == alert_id).first()
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    resolve_alert(db, alert)
    return {"id": alert_id, "status": "resolved"}
