# app/auth.py
"""
Request identity dependencies.

Bearer tokens are validated by the auth gateway in front of this service; it
forwards the authenticated user id in the X-User-Id header (configurable via
USER_ID_HEADER). The role is looked up per request from user_roles.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.exceptions import NotAuthenticated, PermissionDenied
from app.services.role_service import Caller, resolve_caller


def get_caller(request: Request, db: Session = Depends(get_db)) -> Caller:
    """FastAPI dependency — the authenticated caller with their role."""
    user_id = (request.headers.get(settings.USER_ID_HEADER) or "").strip()
    if not user_id:
        raise NotAuthenticated("Authenticated user id required")
    return resolve_caller(db, user_id)


def require_fleet_admin(caller: Caller = Depends(get_caller)) -> Caller:
    """FastAPI dependency — rejects callers without fleet_admin / admin role."""
    if not caller.is_fleet_admin:
        raise PermissionDenied("Fleet admin access required")
    return caller
