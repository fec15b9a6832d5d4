# app/routers/bookings.py
"""
Booking / return actions and booking history.
POST /vehicles/{id}/book   — assign an available vehicle to the caller
POST /vehicles/{id}/return — hand it back with readings + comments
Both return the updated vehicle so clients can merge it without re-fetching.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.auth import get_caller
from app.database import get_db
from app.exceptions import PermissionDenied
from app.schemas.booking_history import BookingHistoryOut
from app.schemas.vehicle import VehicleOut, VehicleReturn
from app.services import booking_service, ledger_service, vehicle_service
from app.services.role_service import Caller

router = APIRouter()


@router.post("/vehicles/{vehicle_id}/book", response_model=VehicleOut, summary="Book a vehicle")
def book_vehicle(vehicle_id: str, db: Session = Depends(get_db),
                 caller: Caller = Depends(get_caller)):
    """Fails with 409 and the current status if the vehicle is not available."""
    return booking_service.book_vehicle(db, vehicle_id, caller)


@router.post("/vehicles/{vehicle_id}/return", response_model=VehicleOut, summary="Return a vehicle")
def return_vehicle(vehicle_id: str, body: Optional[VehicleReturn] = None,
                   db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    """The body (readings and comments) is optional."""
    body = body or VehicleReturn()
    return booking_service.return_vehicle(
        db, vehicle_id, caller,
        mileage=body.mileage,
        operating_hours=body.operating_hours,
        comments=body.comments,
    )


@router.get("/vehicles/{vehicle_id}/booking-history", response_model=list[BookingHistoryOut],
            summary="Booking history of one vehicle")
def vehicle_booking_history(vehicle_id: str, limit: Optional[int] = Query(None, ge=1),
                            offset: int = Query(0, ge=0), db: Session = Depends(get_db),
                            caller: Caller = Depends(get_caller)):
    vehicle_service.get_vehicle(db, vehicle_id)
    return ledger_service.list_history(db, vehicle_id, limit, offset)


@router.get("/booking-history", response_model=list[BookingHistoryOut], summary="Booking history")
def booking_history(vehicle_id: Optional[str] = None, limit: Optional[int] = Query(None, ge=1),
                    offset: int = Query(0, ge=0), db: Session = Depends(get_db),
                    caller: Caller = Depends(get_caller)):
    """Fleet admins may list everything; other users must pick a vehicle."""
    if not vehicle_id and not caller.is_fleet_admin:
        raise PermissionDenied("vehicle_id is required unless you are a fleet admin")
    return ledger_service.list_history(db, vehicle_id, limit, offset)
