# app/services/booking_service.py
"""
Vehicle booking / return workflow.

    available ──book──▶ booked ──return──▶ available

maintenance / damaged are administrator-only states; booking is refused from them.

Ordering rule: the vehicle row is the source of truth and is written first.
The booking-history ledger is written afterwards on a best-effort basis —
a ledger failure is logged and raised as an alert, never rolled back into
the vehicle change and never reported to the user as a failed booking/return.

These functions block on the database; routers call them from plain `def`
endpoints so FastAPI runs them in its threadpool.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.exceptions import (
    InvalidStatusTransition, LedgerError, LedgerIntegrityAnomaly, NotVehicleHolder,
    PermissionDenied, VehicleNotAvailable,
)
from app.models.vehicle import Vehicle, VehicleStatus
from app.services import ledger_service, vehicle_service
from app.services.alert_service import create_alert
from app.services.role_service import Caller
from app.utils.logger import get_logger

logger = get_logger(__name__)


def book_vehicle(db: Session, vehicle_id: str, caller: Caller) -> Vehicle:
    """Assign an available vehicle to the caller. Returns the updated vehicle."""
    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    if vehicle.status != VehicleStatus.AVAILABLE:
        logger.info(f"[BOOK] Refused {vehicle.registration_number} for {caller.user_id}: "
                    f"status={vehicle.status.value}")
        raise VehicleNotAvailable(vehicle_id, vehicle.status)

    # Readings before the update become the ledger's initial readings
    before = vehicle_service.snapshot(vehicle)
    booked_at = datetime.utcnow()

    vehicle = vehicle_service.update_vehicle_status(
        db, vehicle_id, VehicleStatus.BOOKED,
        expected_status=VehicleStatus.AVAILABLE,
        holder_id=caller.user_id,
        booked_at=booked_at,
        before=before,
    )
    logger.info(f"[BOOK] {vehicle.registration_number} booked by {caller.user_id}")

    try:
        ledger_service.open_record(db, vehicle_id, caller.user_id, booked_at,
                                   before["mileage"], before["operating_hours"])
    except LedgerError as e:
        _report_ledger_fault(db, e, vehicle_id, caller.user_id)

    return vehicle


def return_vehicle(db: Session, vehicle_id: str, caller: Caller,
                   mileage: Optional[int] = None, operating_hours: Optional[float] = None,
                   comments: Optional[str] = None) -> Vehicle:
    """
    Hand a vehicle back. Allowed for the holder or a fleet admin.

    Returning an already-available vehicle is a no-op apart from writing any
    supplied readings, so clients can retry safely.
    """
    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    before = vehicle_service.snapshot(vehicle)

    if vehicle.status == VehicleStatus.AVAILABLE:
        logger.info(f"[RETURN] {vehicle.registration_number} already available — nothing to close")
        if mileage is None and operating_hours is None:
            return vehicle
        return vehicle_service.update_vehicle_status(
            db, vehicle_id, VehicleStatus.AVAILABLE,
            expected_status=VehicleStatus.AVAILABLE,
            mileage=mileage, operating_hours=operating_hours,
            before=before,
        )

    if vehicle.status != VehicleStatus.BOOKED:
        raise InvalidStatusTransition(
            f"Vehicle {vehicle_id} is in {vehicle.status.value} and cannot be returned"
        )
    holder_id = vehicle.current_user_id
    if holder_id != caller.user_id and not caller.is_fleet_admin:
        raise NotVehicleHolder(vehicle_id, caller.user_id)

    open_record = None
    try:
        open_record = ledger_service.find_open_record(db, vehicle_id)
    except LedgerError as e:
        _report_ledger_fault(db, e, vehicle_id, holder_id)

    # The record is still closed below; the mismatch is left for an operator
    if open_record is not None and open_record.user_id != holder_id:
        mismatch = LedgerIntegrityAnomaly(
            vehicle_id, 1,
            f"Open booking record {open_record.id} for vehicle {vehicle_id} belongs to "
            f"{open_record.user_id}, vehicle holder is {holder_id}",
        )
        _report_ledger_fault(db, mismatch, vehicle_id, holder_id)

    returned_at = datetime.utcnow()
    vehicle = vehicle_service.update_vehicle_status(
        db, vehicle_id, VehicleStatus.AVAILABLE,
        expected_status=VehicleStatus.BOOKED,
        mileage=mileage, operating_hours=operating_hours,
        before=before,
    )
    logger.info(f"[RETURN] {vehicle.registration_number} returned by {caller.user_id} "
                f"(holder {holder_id}) mileage={mileage} hours={operating_hours}")

    if open_record is not None:
        try:
            ledger_service.close_record(db, open_record, returned_at,
                                        mileage, operating_hours, comments)
        except LedgerError as e:
            _report_ledger_fault(db, e, vehicle_id, holder_id)

    return vehicle


def change_vehicle(db: Session, vehicle_id: str, changes: dict, caller: Caller) -> Vehicle:
    """
    Administrator edit. When a booked vehicle is moved out of `booked`
    (e.g. to maintenance), its open ledger record is closed as well.
    """
    if not caller.is_fleet_admin:
        raise PermissionDenied("Fleet admin access required")

    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    before = vehicle_service.snapshot(vehicle)
    previous_status = vehicle.status
    holder_id = vehicle.current_user_id

    vehicle = vehicle_service.update_vehicle(db, vehicle_id, changes,
                                             expected_status=previous_status, before=before)

    if previous_status == VehicleStatus.BOOKED and vehicle.status != VehicleStatus.BOOKED:
        logger.info(f"[ADMIN] {caller.user_id} moved {vehicle.registration_number} "
                    f"from booked to {vehicle.status.value}")
        try:
            ledger_service.close_open_record(
                db, vehicle_id, datetime.utcnow(),
                return_mileage=changes.get("mileage"),
                return_operating_hours=changes.get("operating_hours"),
                comments=f"Closed by administrator: status set to {vehicle.status.value}",
            )
        except LedgerError as e:
            _report_ledger_fault(db, e, vehicle_id, holder_id)

    return vehicle


def _report_ledger_fault(db: Session, error: LedgerError, vehicle_id: str,
                         user_id: Optional[str]):
    logger.error(f"[LEDGER] {error.alert_type} vehicle={vehicle_id}: {error}")
    try:
        create_alert(db, error.alert_type, str(error), vehicle_id=vehicle_id, user_id=user_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Could not record ledger alert for vehicle {vehicle_id}: {e}")
