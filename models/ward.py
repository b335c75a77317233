# models/ward.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


# -------------------------------------------------
# Shared fields
# -------------------------------------------------
class WardBase(BaseModel):
    name: str
    description: Optional[str] = None
    local_govt: Optional[str] = None


# -------------------------------------------------
# Create
# -------------------------------------------------
class WardCreate(WardBase):
    """
    Used when creating a ward in Supabase.
    No ID supplied: Supabase generates UUID.
    """
    admin_id: Optional[str] = None


# -------------------------------------------------
# Read (Supabase → API response)
# -------------------------------------------------
class WardRead(WardBase):
    id: str
    admin_id: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------------------------------------------------
# Update (PUT, partial)
# -------------------------------------------------
class WardUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    local_govt: Optional[str] = None
    admin_id: Optional[str] = None


# -------------------------------------------------
# Per-ward statistics
# -------------------------------------------------
class WardStats(BaseModel):
    ward_id: str
    name: str
    total_zones: int = 0
    total_users: int = 0
    verified_users: int = 0
    pending_users: int = 0
    approval_rate: int = 0
