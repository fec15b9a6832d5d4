# app/models/profile.py
"""
User profiles — display details for the people who book vehicles.
The id is the authenticated user id forwarded by the gateway (same value as
vehicles.current_user_id / booking_history.user_id).
"""

from sqlalchemy import Column, String, DateTime
from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String(200), unique=True, nullable=False)
    full_name = Column(String(200))
    department = Column(String(100))
    employee_id = Column(String(100))
    phone = Column(String(50))
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Profile {self.id} {self.email}>"
