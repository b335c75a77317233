# models/zone.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ZoneBase(BaseModel):
    name: str
    ward_id: str              # owning ward (must exist)
    description: Optional[str] = None


class ZoneCreate(ZoneBase):
    admin_id: Optional[str] = None


class ZoneRead(ZoneBase):
    id: str
    admin_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ZoneUpdate(BaseModel):
    name: Optional[str] = None
    ward_id: Optional[str] = None
    description: Optional[str] = None
    admin_id: Optional[str] = None


class ZoneStats(BaseModel):
    zone_id: str
    name: str
    ward_id: Optional[str] = None
    ward_name: Optional[str] = None
    total_users: int = 0
    verified_users: int = 0
    pending_users: int = 0
    approval_rate: int = 0
