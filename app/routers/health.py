# app/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB, plus unresolved ledger alert count.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import func, text
from app.database import get_db
from app.models.alert import Alert
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Number of unresolved alerts (ledger faults waiting for an operator)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "open_alerts": None,
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
        result["open_alerts"] = db.query(func.count(Alert.id)).filter(Alert.is_resolved == 0).scalar()
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    return result
