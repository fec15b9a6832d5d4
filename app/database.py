# app/database.py
"""
Database connection, session management, and table creation.
Uses SQLAlchemy with PostgreSQL (SQLite is accepted for local runs and tests).
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import sessionmaker
from app.config import settings

_engine_options = {
    "pool_pre_ping": True,            # Auto-reconnect if DB connection drops
    "echo": settings.DATABASE_ECHO,
}
if settings.DATABASE_URL.startswith("sqlite"):
    _engine_options["connect_args"] = {"check_same_thread": False}
else:
    _engine_options.update(pool_size=10, max_overflow=20)

engine = create_engine(settings.DATABASE_URL, **_engine_options)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from app.models.site import Site                       # noqa
    from app.models.user_role import UserRole              # noqa
    from app.models.profile import Profile                 # noqa
    from app.models.vehicle import Vehicle                 # noqa
    from app.models.booking_history import BookingHistory  # noqa
    from app.models.alert import Alert                     # noqa

    Base.metadata.create_all(bind=bind or engine)
