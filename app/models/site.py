# app/models/site.py
"""Company sites / depots a vehicle can be assigned to."""

import uuid

from sqlalchemy import Column, String, DateTime
from app.database import Base


class Site(Base):
    __tablename__ = "sites"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), unique=True, nullable=False)
    location = Column(String(200))
    created_at = Column(DateTime)

    def __repr__(self):
        return f"<Site {self.name}>"
