# tests/conftest.py
"""Shared fixtures: an isolated in-memory SQLite database per test."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", "")
os.environ.setdefault("API_KEY", "")

import itertools
from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import create_tables
from app.models.user_role import AppRole
from app.models.vehicle import VehicleStatus, VehicleType
from app.services import vehicle_service
from app.services.role_service import Caller


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_vehicle(db):
    counter = itertools.count(1)

    def _make(**overrides):
        data = {
            "registration_number": f"TST-{next(counter):04d}",
            "type": VehicleType.TRUCK,
            "make": "Volvo",
            "model": "FH16",
            "year": 2021,
            "location": "Main Depot",
            "status": VehicleStatus.AVAILABLE,
            "mileage": 1000,
            "operating_hours": None,
            "last_inspection": date(2026, 1, 10),
            "next_maintenance": date(2026, 12, 1),
        }
        data.update(overrides)
        return vehicle_service.create_vehicle(db, data)

    return _make


@pytest.fixture
def alice():
    return Caller(user_id="user-alice")


@pytest.fixture
def bob():
    return Caller(user_id="user-bob")


@pytest.fixture
def fleet_admin():
    return Caller(user_id="user-admin", role=AppRole.FLEET_ADMIN)
