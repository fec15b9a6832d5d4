# app/services/alert_service.py
"""
Shared alert creation service.
Used by booking_service to surface booking-history ledger faults to operators
without failing the user's book/return action.
Extend here to add push notifications, email, etc.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.models.alert import Alert
from app.utils.logger import get_logger

logger = get_logger(__name__)


def create_alert(db: Session, alert_type: str, description: str,
                 vehicle_id: Optional[str] = None, user_id: Optional[str] = None):
    """Create and persist an alert record. Always commits immediately."""
    db.add(Alert(alert_type=alert_type, vehicle_id=vehicle_id, user_id=user_id,
                 description=description, is_resolved=0, triggered_at=datetime.utcnow()))
    db.commit()
    logger.warning(f"[ALERT][{alert_type.upper()}] {description}")


def resolve_alert(db: Session, alert: Alert) -> Alert:
    alert.is_resolved = 1
    alert.resolved_at = datetime.utcnow()
    db.commit()
    return alert
