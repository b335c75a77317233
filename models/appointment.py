# models/appointment.py

from datetime import datetime
from typing import Optional, Literal
from pydantic import BaseModel, EmailStr


AppointableRole = Literal["wardAdmin", "zonalAdmin"]


# -----------------------------------------------------
# Direct appointment of an existing verified member
# -----------------------------------------------------
class AppointAdminRequest(BaseModel):
    user_id: str
    role: AppointableRole
    zone_id: Optional[str] = None
    ward_id: Optional[str] = None


# -----------------------------------------------------
# Admin record edits (name/contact and reassignment)
# -----------------------------------------------------
class AdminUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    zone_id: Optional[str] = None
    ward_id: Optional[str] = None


# -----------------------------------------------------
# Email invitation for someone without an account
# -----------------------------------------------------
class AppointmentCreate(BaseModel):
    appointee_email: EmailStr
    appointee_name: str
    role: AppointableRole
    zone_id: Optional[str] = None
    ward_id: Optional[str] = None


class AppointmentAccept(BaseModel):
    password: str
    phone: Optional[str] = None


class AppointmentRead(BaseModel):
    id: str
    appointee_email: str
    appointee_name: str
    role: str
    zone_id: Optional[str] = None
    ward_id: Optional[str] = None
    appointed_by: Optional[str] = None
    status: str
    email_sent: bool = False
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    accepted_at: Optional[datetime] = None


class AdminStats(BaseModel):
    total_admins: int = 0
    super_admins: int = 0
    ward_admins: int = 0
    zonal_admins: int = 0
    active_admins: int = 0
    suspended_admins: int = 0
    pending_appointments: int = 0
