# app/services/vehicle_service.py
"""
Vehicle repository: every read and write of vehicle state goes through here.

No caching — each read hits the database. Status transitions are conditional
on the status the caller last read (UPDATE ... WHERE status = :expected), so two
clients racing for the same vehicle cannot both win; the loser gets
ConflictingUpdate and can re-fetch.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from app.config import settings
from app.exceptions import (
    BackendUnavailable, ConflictingUpdate, DuplicateRegistration, FleetError,
    InvalidStatusTransition, VehicleNotFound,
)
from app.models.site import Site
from app.models.vehicle import Vehicle, VehicleStatus, VehicleType
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Fields an administrator may change through PUT /vehicles/{id}
ADMIN_EDITABLE_FIELDS = ("status", "location", "mileage", "operating_hours", "fuel_level", "battery_level")


def page_limit(limit: Optional[int]) -> int:
    """Requested page size, defaulted and capped by settings."""
    return min(limit or settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT)


def get_vehicle(db: Session, vehicle_id: str) -> Vehicle:
    """Current snapshot of a vehicle. Raises VehicleNotFound."""
    try:
        vehicle = (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id)
            .populate_existing()
            .first()
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Vehicle read failed for {vehicle_id}: {e}")
        raise BackendUnavailable("Vehicle store unavailable") from e
    if vehicle is None:
        raise VehicleNotFound(vehicle_id)
    return vehicle


def list_vehicles(db: Session, status: Optional[VehicleStatus] = None,
                  vehicle_type: Optional[VehicleType] = None, site_id: Optional[str] = None,
                  limit: Optional[int] = None, offset: int = 0):
    """Returns (page, total) where total counts every vehicle matching the filters."""
    limit = page_limit(limit)
    q = db.query(Vehicle)
    if status:
        q = q.filter(Vehicle.status == status)
    if vehicle_type:
        q = q.filter(Vehicle.type == vehicle_type)
    if site_id:
        q = q.filter(Vehicle.site_id == site_id)
    try:
        total = q.count()
        page = q.order_by(Vehicle.registration_number).offset(offset).limit(limit).all()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Vehicle list failed: {e}")
        raise BackendUnavailable("Failed to fetch vehicles") from e
    return page, total


def update_vehicle_status(db: Session, vehicle_id: str, status: VehicleStatus,
                          expected_status: VehicleStatus, holder_id: Optional[str] = None,
                          booked_at: Optional[datetime] = None, mileage: Optional[int] = None,
                          operating_hours: Optional[float] = None,
                          before: Optional[dict] = None) -> Vehicle:
    """
    Conditionally move a vehicle to `status`.

    Holder and booked-at are written together: set for BOOKED, cleared otherwise.
    Meter readings are only written when supplied (0 is a reading, None is not).
    `before` is a snapshot() taken when the caller read the vehicle; it lets a
    committed write still be reported if the follow-up read fails.
    """
    if status == VehicleStatus.BOOKED and (holder_id is None or booked_at is None):
        raise ValueError("A booked vehicle needs both a holder and a booked_at timestamp")
    if status != VehicleStatus.BOOKED:
        holder_id, booked_at = None, None

    values = {
        Vehicle.status: status,
        Vehicle.current_user_id: holder_id,
        Vehicle.booked_at: booked_at,
        Vehicle.updated_at: datetime.utcnow(),
    }
    if mileage is not None:
        values[Vehicle.mileage] = mileage
    if operating_hours is not None:
        values[Vehicle.operating_hours] = operating_hours

    _conditional_update(db, vehicle_id, expected_status, values)
    logger.info(f"Vehicle {vehicle_id}: {expected_status.value} → {status.value} holder={holder_id}")
    return _reread(db, vehicle_id, values, before)


def create_vehicle(db: Session, data: dict) -> Vehicle:
    """Administrator fleet setup. New vehicles cannot start out booked."""
    if data.get("status") == VehicleStatus.BOOKED:
        raise InvalidStatusTransition("Vehicles can only become booked through the booking workflow")
    if data.get("site_id") and not db.query(Site).filter(Site.id == data["site_id"]).first():
        raise FleetError(f"Site {data['site_id']} does not exist")
    if db.query(Vehicle).filter(Vehicle.registration_number == data["registration_number"]).first():
        raise DuplicateRegistration(data["registration_number"])

    now = datetime.utcnow()
    vehicle = Vehicle(**data, created_at=now, updated_at=now)
    try:
        db.add(vehicle)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateRegistration(data["registration_number"]) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Vehicle insert failed: {e}")
        raise BackendUnavailable("Failed to add vehicle") from e
    logger.info(f"Vehicle added: {vehicle.registration_number} ({vehicle.type.value})")
    return vehicle


def update_vehicle(db: Session, vehicle_id: str, changes: dict,
                   expected_status: Optional[VehicleStatus] = None,
                   before: Optional[dict] = None) -> Vehicle:
    """
    Administrator partial edit restricted to ADMIN_EDITABLE_FIELDS.
    Leaving `booked` clears holder and booked-at; entering it is refused.
    """
    values = {k: v for k, v in changes.items() if k in ADMIN_EDITABLE_FIELDS and v is not None}
    if not values:
        raise FleetError("No valid fields to update")

    if expected_status is None:
        expected_status = get_vehicle(db, vehicle_id).status
    expected_status = VehicleStatus(expected_status)

    new_status = values.get("status")
    if new_status is not None:
        new_status = VehicleStatus(new_status)
        if new_status == VehicleStatus.BOOKED and expected_status != VehicleStatus.BOOKED:
            raise InvalidStatusTransition("Vehicles can only become booked through the booking workflow")
        if new_status == expected_status:
            values.pop("status")
        else:
            values["status"] = new_status
            if expected_status == VehicleStatus.BOOKED:
                values["current_user_id"] = None
                values["booked_at"] = None
    values["updated_at"] = datetime.utcnow()

    _conditional_update(db, vehicle_id, expected_status, values)
    logger.info(f"Vehicle {vehicle_id} updated by administrator: {sorted(values)}")
    return _reread(db, vehicle_id, values, before)


def snapshot(vehicle: Vehicle) -> dict:
    """Plain column values of a loaded vehicle."""
    return {c.key: getattr(vehicle, c.key) for c in Vehicle.__table__.columns}


def _reread(db: Session, vehicle_id: str, values: dict, before: Optional[dict]) -> Vehicle:
    """
    Read back a vehicle after a committed write. If the read fails the write
    still stands, so answer with the snapshot overlaid with what was written.
    """
    try:
        return get_vehicle(db, vehicle_id)
    except BackendUnavailable:
        if before is None:
            raise
        logger.warning(f"Vehicle {vehicle_id} written but could not be re-read; returning written values")
        written = {getattr(k, "key", k): v for k, v in values.items()}
        return Vehicle(**{**before, **written})


def _conditional_update(db: Session, vehicle_id: str, expected_status: VehicleStatus, values: dict):
    try:
        updated = (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id, Vehicle.status == expected_status)
            .update(values, synchronize_session=False)
        )
        if not updated:
            db.rollback()
        else:
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Vehicle write failed for {vehicle_id}: {e}")
        raise BackendUnavailable("Failed to update vehicle") from e

    if not updated:
        # Either the row vanished or someone changed its status after our read
        current = get_vehicle(db, vehicle_id)
        logger.warning(
            f"Conditional update lost for {vehicle_id}: expected {expected_status.value}, "
            f"found {current.status.value}"
        )
        raise ConflictingUpdate(vehicle_id, expected_status)
