# app/schemas/site.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class SiteCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: Optional[str] = None


class SiteOut(BaseModel):
    id: str
    name: str
    location: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
