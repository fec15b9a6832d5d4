# app/schemas/vehicle.py
from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Optional
from app.models.vehicle import VehicleStatus, VehicleType


class VehicleCreate(BaseModel):
    registration_number: str = Field(min_length=1, max_length=50)
    type: VehicleType
    make: str
    model: str
    year: int = Field(ge=1900, le=2100)
    location: str
    status: VehicleStatus = VehicleStatus.AVAILABLE
    site_id: Optional[str] = None
    image_url: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    operating_hours: Optional[float] = Field(default=None, ge=0)
    fuel_level: Optional[int] = Field(default=None, ge=0, le=100)
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)
    last_inspection: date
    next_maintenance: date


class VehicleUpdate(BaseModel):
    """Administrator edit. Only fields explicitly sent are applied."""
    status: Optional[VehicleStatus] = None
    location: Optional[str] = None
    mileage: Optional[int] = Field(default=None, ge=0)
    operating_hours: Optional[float] = Field(default=None, ge=0)
    fuel_level: Optional[int] = Field(default=None, ge=0, le=100)
    battery_level: Optional[int] = Field(default=None, ge=0, le=100)


class VehicleReturn(BaseModel):
    """Readings captured when handing a vehicle back. 0 is a real reading."""
    mileage: Optional[int] = Field(default=None, ge=0)
    operating_hours: Optional[float] = Field(default=None, ge=0)
    comments: Optional[str] = None


class VehicleOut(BaseModel):
    id: str
    registration_number: str
    type: VehicleType
    make: str
    model: str
    year: int
    status: VehicleStatus
    location: str
    site_id: Optional[str]
    image_url: Optional[str]
    mileage: Optional[int]
    operating_hours: Optional[float]
    fuel_level: Optional[int]
    battery_level: Optional[int]
    last_inspection: date
    next_maintenance: date
    current_user_id: Optional[str]
    booked_at: Optional[datetime]
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class VehiclePage(BaseModel):
    vehicles: list[VehicleOut]
    total: int
    limit: int
    offset: int


class VehicleUpdateOut(BaseModel):
    message: str
    vehicle: VehicleOut
