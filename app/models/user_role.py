# app/models/user_role.py
"""
User roles table.
A user without a row is treated as a plain `user`.
Rows are maintained by the admin tooling (scripts/setup/seed_fleet.py here).
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from app.database import Base


class AppRole(str, enum.Enum):
    ADMIN = "admin"
    FLEET_ADMIN = "fleet_admin"
    USER = "user"


FLEET_ADMIN_ROLES = {AppRole.ADMIN, AppRole.FLEET_ADMIN}


class UserRole(Base):
    __tablename__ = "user_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(36), unique=True, nullable=False, index=True)
    role = Column(Enum(AppRole, values_callable=lambda e: [m.value for m in e],
                       native_enum=False, length=20),
                  nullable=False, default=AppRole.USER)
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<UserRole {self.user_id} role={self.role}>"
