# app/routers/sites.py
"""Sites — list for everyone, create for fleet admins."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from datetime import datetime
from app.auth import get_caller, require_fleet_admin
from app.database import get_db
from app.models.site import Site
from app.schemas.site import SiteCreate, SiteOut
from app.services.role_service import Caller

router = APIRouter()


@router.get("/sites", response_model=list[SiteOut], summary="List sites")
def list_sites(db: Session = Depends(get_db), caller: Caller = Depends(get_caller)):
    return db.query(Site).order_by(Site.name).all()


@router.post("/sites", response_model=SiteOut, status_code=201, summary="Create a site")
def create_site(body: SiteCreate, db: Session = Depends(get_db),
                caller: Caller = Depends(require_fleet_admin)):
    if db.query(Site).filter(Site.name == body.name).first():
        raise HTTPException(status_code=409, detail=f"Site {body.name} already exists")
    site = Site(name=body.name, location=body.location, created_at=datetime.utcnow())
    try:
        db.add(site)
        db.commit()
    except IntegrityError:
        # Created concurrently after the name check
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Site {body.name} already exists")
    return site
