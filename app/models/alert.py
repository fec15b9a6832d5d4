# app/models/alert.py
"""
Alerts table — operational alerts raised by the backend.
Currently written by booking_service when the booking-history ledger
fails or is found inconsistent (these never fail the user's action).
"""

from sqlalchemy import Column, Integer, String, DateTime, Text
from app.database import Base


class Alert(Base):
    __tablename__ = "alerts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    alert_type = Column(String(50), nullable=False, index=True)  # ledger_write_failed | ledger_integrity
    vehicle_id = Column(String(36), index=True)
    user_id = Column(String(36))
    description = Column(Text)
    is_resolved = Column(Integer, default=0, nullable=False)
    triggered_at = Column(DateTime, nullable=False, index=True)
    resolved_at = Column(DateTime)

    def __repr__(self):
        return f"<Alert {self.id} type={self.alert_type} resolved={self.is_resolved}>"
