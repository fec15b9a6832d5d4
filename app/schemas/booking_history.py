# app/schemas/booking_history.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class BookedVehicleSummary(BaseModel):
    registration_number: str
    make: str
    model: str

    class Config:
        from_attributes = True


class BookerProfileSummary(BaseModel):
    full_name: Optional[str]
    email: str

    class Config:
        from_attributes = True


class BookingHistoryOut(BaseModel):
    id: str
    vehicle_id: str
    user_id: str
    booked_at: datetime
    returned_at: Optional[datetime]
    initial_mileage: Optional[int]
    return_mileage: Optional[int]
    initial_operating_hours: Optional[float]
    return_operating_hours: Optional[float]
    comments: Optional[str]
    created_at: datetime
    vehicle: Optional[BookedVehicleSummary] = None
    profile: Optional[BookerProfileSummary] = None   # None when the user has no profile

    class Config:
        from_attributes = True
