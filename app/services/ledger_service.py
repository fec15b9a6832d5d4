# app/services/ledger_service.py
"""
Booking history ledger.

Append/close audit log kept next to (not inside) vehicle state:
  - open_record   → inserted when a booking begins (returned_at = NULL)
  - close_record  → sets returned_at + return readings, exactly once
Per vehicle at most one record may be open. This module reports violations
(LedgerIntegrityAnomaly) but does not repair them; all storage errors are
raised as LedgerWriteFailed so the workflow can treat the ledger as best-effort.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
from app.config import settings
from app.exceptions import BackendUnavailable, LedgerIntegrityAnomaly, LedgerWriteFailed
from app.models.booking_history import BookingHistory
from app.utils.logger import get_logger

logger = get_logger(__name__)


def open_record(db: Session, vehicle_id: str, user_id: str, booked_at: datetime,
                initial_mileage: Optional[int] = None,
                initial_operating_hours: Optional[float] = None) -> BookingHistory:
    """Insert an open record. Does not check for an existing open record."""
    record = BookingHistory(
        vehicle_id=vehicle_id,
        user_id=user_id,
        booked_at=booked_at,
        initial_mileage=initial_mileage,
        initial_operating_hours=initial_operating_hours,
        created_at=datetime.utcnow(),
    )
    try:
        db.add(record)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise LedgerWriteFailed(f"Could not open booking record for vehicle {vehicle_id}: {e}") from e
    logger.info(f"[LEDGER] Opened {record.id} vehicle={vehicle_id} user={user_id}")
    return record


def find_open_records(db: Session, vehicle_id: str) -> list:
    try:
        return (
            db.query(BookingHistory)
            .filter(BookingHistory.vehicle_id == vehicle_id, BookingHistory.returned_at == None)  # noqa: E711
            .order_by(BookingHistory.booked_at.desc())
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise LedgerWriteFailed(f"Could not read booking records for vehicle {vehicle_id}: {e}") from e


def find_open_record(db: Session, vehicle_id: str) -> BookingHistory:
    """The single open record for a vehicle. Zero or several is an integrity anomaly."""
    records = find_open_records(db, vehicle_id)
    if len(records) != 1:
        raise LedgerIntegrityAnomaly(vehicle_id, len(records))
    return records[0]


def close_record(db: Session, record: BookingHistory, returned_at: datetime,
                 return_mileage: Optional[int] = None,
                 return_operating_hours: Optional[float] = None,
                 comments: Optional[str] = None) -> BookingHistory:
    if not record.is_open:
        raise LedgerIntegrityAnomaly(record.vehicle_id, 0)

    record.returned_at = returned_at
    if return_mileage is not None:
        record.return_mileage = return_mileage
    if return_operating_hours is not None:
        record.return_operating_hours = return_operating_hours
    if comments:
        record.comments = comments
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise LedgerWriteFailed(f"Could not close booking record {record.id}: {e}") from e
    logger.info(f"[LEDGER] Closed {record.id} vehicle={record.vehicle_id}")
    return record


def close_open_record(db: Session, vehicle_id: str, returned_at: datetime,
                      return_mileage: Optional[int] = None,
                      return_operating_hours: Optional[float] = None,
                      comments: Optional[str] = None) -> BookingHistory:
    record = find_open_record(db, vehicle_id)
    return close_record(db, record, returned_at, return_mileage, return_operating_hours, comments)


def list_history(db: Session, vehicle_id: Optional[str] = None,
                 limit: Optional[int] = None, offset: int = 0) -> list:
    """Booking records, newest booking first, with vehicle and profile loaded."""
    limit = min(limit or settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)
    q = db.query(BookingHistory).options(
        joinedload(BookingHistory.vehicle),
        joinedload(BookingHistory.profile),
    )
    if vehicle_id:
        q = q.filter(BookingHistory.vehicle_id == vehicle_id)
    try:
        return q.order_by(BookingHistory.booked_at.desc()).offset(offset).limit(limit).all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Booking history read failed: {e}")
        raise BackendUnavailable("Failed to fetch booking history") from e
