# models/user.py

from typing import Optional, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr

from models.enums import ApprovalStatus
from core.utils import field_of


# ===============================================================
# USERS TABLE MODELS
# ===============================================================

class UserRecord(BaseModel):
    """
    One row of the `users` table.
    Optional relationships are explicit None, never empty strings.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    email: str
    name: Optional[str] = None
    role: str = "member"
    zone_id: Optional[str] = None
    ward_id: Optional[str] = None
    verified: bool = False
    status: str = "active"

    appointed_by: Optional[str] = None
    appointed_at: Optional[datetime] = None

    rejection_reason: Optional[str] = None
    verified_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    rejected_by: Optional[str] = None
    rejected_at: Optional[datetime] = None
    reassigned_by: Optional[str] = None
    reassigned_at: Optional[datetime] = None

    # Free-form profile fields
    phone: Optional[str] = None
    address: Optional[str] = None
    id_number: Optional[str] = None
    id_type: Optional[str] = None
    dob: Optional[str] = None
    occupation: Optional[str] = None
    qualification: Optional[str] = None
    local_govt: Optional[str] = None
    profile_picture: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserWithActions(UserRecord):
    """User row plus the action menu the caller may render for it."""
    approval_status: ApprovalStatus
    allowed_actions: list[str] = []


# -------------------------------------------------
# Admin edits of a member's profile
# -------------------------------------------------
class UserUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    id_number: Optional[str] = None
    id_type: Optional[str] = None
    dob: Optional[str] = None
    occupation: Optional[str] = None
    qualification: Optional[str] = None
    local_govt: Optional[str] = None


# -------------------------------------------------
# Approval workflow payloads
# -------------------------------------------------
class RejectRequest(BaseModel):
    reason: str


class ReassignRequest(BaseModel):
    zone_id: str
    ward_id: str


# -------------------------------------------------
# Self-service profile
# -------------------------------------------------
class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


def approval_status(user: Any) -> ApprovalStatus:
    """
    Classify a registrant:
      • verified is True            → approved
      • non-empty rejection_reason  → rejected
      • otherwise                   → pending
    """
    if field_of(user, "verified") is True:
        return ApprovalStatus.approved

    reason = field_of(user, "rejection_reason")
    if reason is not None and str(reason).strip() != "":
        return ApprovalStatus.rejected

    return ApprovalStatus.pending
