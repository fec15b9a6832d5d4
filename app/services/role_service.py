# app/services/role_service.py
"""
Caller identity and role resolution.
The workflow never reads an ambient "current user": routers resolve a Caller
once per request and pass it explicitly into every service call.
"""

from dataclasses import dataclass
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.exceptions import BackendUnavailable
from app.models.user_role import AppRole, UserRole, FLEET_ADMIN_ROLES
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Caller:
    user_id: str
    role: AppRole = AppRole.USER

    @property
    def is_fleet_admin(self) -> bool:
        return self.role in FLEET_ADMIN_ROLES


def get_user_role(db: Session, user_id: str) -> AppRole:
    """Role for a user; users without a user_roles row are plain users."""
    try:
        row = db.query(UserRole).filter(UserRole.user_id == user_id).first()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Role lookup failed for user {user_id}: {e}")
        raise BackendUnavailable("Failed to verify user permissions") from e
    return AppRole(row.role) if row else AppRole.USER


def resolve_caller(db: Session, user_id: str) -> Caller:
    return Caller(user_id=user_id, role=get_user_role(db, user_id))


def set_user_role(db: Session, user_id: str, role: AppRole) -> UserRole:
    """Create or replace a user's role. Used by setup scripts."""
    row = db.query(UserRole).filter(UserRole.user_id == user_id).first()
    if row:
        row.role = role
    else:
        row = UserRole(user_id=user_id, role=role, created_at=datetime.utcnow())
        db.add(row)
    db.commit()
    logger.info(f"Role for user {user_id} set to {role.value}")
    return row
