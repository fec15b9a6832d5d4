# app/models/vehicle.py
"""
Fleet vehicles table.
Holds the authoritative current state of each vehicle: status, holder and meters.
Mutated by booking_service (book/return) and by administrator edits.
"""

import enum
import uuid

from sqlalchemy import Column, Integer, Float, String, Date, DateTime, ForeignKey, Enum
from app.database import Base


class VehicleType(str, enum.Enum):
    TRUCK = "truck"
    FORKLIFT = "forklift"
    CAR = "car"


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "available"
    BOOKED = "booked"
    MAINTENANCE = "maintenance"
    DAMAGED = "damaged"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    registration_number = Column(String(50), unique=True, nullable=False, index=True)
    type = Column(Enum(VehicleType, values_callable=_enum_values, native_enum=False, length=20),
                  nullable=False, index=True)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    location = Column(String(200), nullable=False)
    site_id = Column(String(36), ForeignKey("sites.id"), index=True)
    image_url = Column(String(500))

    status = Column(Enum(VehicleStatus, values_callable=_enum_values, native_enum=False, length=20),
                    nullable=False, default=VehicleStatus.AVAILABLE, index=True)
    current_user_id = Column(String(36), index=True)   # holder; set iff status == booked
    booked_at = Column(DateTime)                        # set iff status == booked

    mileage = Column(Integer)            # odometer
    operating_hours = Column(Float)
    fuel_level = Column(Integer)         # percent 0–100
    battery_level = Column(Integer)      # percent 0–100

    last_inspection = Column(Date, nullable=False)
    next_maintenance = Column(Date, nullable=False)

    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    @property
    def is_booked(self) -> bool:
        return self.status == VehicleStatus.BOOKED

    def __repr__(self):
        return f"<Vehicle {self.registration_number} status={self.status} holder={self.current_user_id}>"
