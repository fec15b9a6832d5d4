# app/routers/vehicles.py
"""Vehicle inventory — browse for everyone, create/edit for fleet admins."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from app.auth import get_caller, require_fleet_admin
from app.database import get_db
from app.models.vehicle import VehicleStatus, VehicleType
from app.schemas.vehicle import VehicleCreate, VehicleOut, VehiclePage, VehicleUpdate, VehicleUpdateOut
from app.services import booking_service, vehicle_service
from app.services.role_service import Caller

router = APIRouter()


@router.get("/vehicles", response_model=VehiclePage, summary="List vehicles")
def list_vehicles(
    status: Optional[VehicleStatus] = None,
    type: Optional[VehicleType] = None,
    site_id: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    """Filter by status, type or site. Paginated with limit/offset."""
    vehicles, total = vehicle_service.list_vehicles(db, status, type, site_id, limit, offset)
    return {"vehicles": vehicles, "total": total,
            "limit": vehicle_service.page_limit(limit), "offset": offset}


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get one vehicle")
def get_vehicle(vehicle_id: str, db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return vehicle_service.get_vehicle(db, vehicle_id)


@router.post("/vehicles", response_model=VehicleOut, status_code=201, summary="Add a vehicle to the fleet")
def add_vehicle(body: VehicleCreate, db: Session = Depends(get_db),
                caller: Caller = Depends(require_fleet_admin)):
    return vehicle_service.create_vehicle(db, body.model_dump())


@router.put("/vehicles/{vehicle_id}", response_model=VehicleUpdateOut, summary="Edit a vehicle")
def update_vehicle(vehicle_id: str, body: VehicleUpdate, db: Session = Depends(get_db),
                   caller: Caller = Depends(require_fleet_admin)):
    """
    Only status, location, mileage, operating_hours, fuel_level and battery_level
    can be changed. Status cannot be set to booked here — use /book.
    """
    vehicle = booking_service.change_vehicle(
        db, vehicle_id, body.model_dump(exclude_unset=True), caller
    )
    return {"message": "Vehicle updated successfully", "vehicle": vehicle}
