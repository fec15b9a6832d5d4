# app/models/booking_history.py
"""
Booking history ledger table.
One row per booking: opened when the vehicle is booked, closed (returned_at set)
exactly once when it is returned. Rows are never deleted.
"""

import uuid

from sqlalchemy import Column, Integer, Float, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class BookingHistory(Base):
    __tablename__ = "booking_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    booked_at = Column(DateTime, nullable=False, index=True)
    returned_at = Column(DateTime)              # NULL while the booking is open
    initial_mileage = Column(Integer)
    return_mileage = Column(Integer)
    initial_operating_hours = Column(Float)
    return_operating_hours = Column(Float)
    comments = Column(Text)
    created_at = Column(DateTime, nullable=False)

    vehicle = relationship("Vehicle", viewonly=True)
    # user_id is not a foreign key: bookings may predate or outlive a profile
    profile = relationship("Profile", primaryjoin="foreign(BookingHistory.user_id) == Profile.id",
                           viewonly=True, uselist=False)

    @property
    def is_open(self) -> bool:
        return self.returned_at is None

    def __repr__(self):
        return f"<BookingHistory {self.id} vehicle={self.vehicle_id} open={self.is_open}>"
