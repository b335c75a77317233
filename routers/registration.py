# routers/registration.py

from fastapi import APIRouter, Query

from core.supabase_client import require_supabase_client
from core.notices import to_response
from core.errors import handle_supabase_error
from models.registration import RegistrationRequest
from services.registration import register_member
from services.geography import list_registration_wards, list_registration_zones


router = APIRouter(
    prefix="/register",
    tags=["Registration"],
)


# -----------------------------------------------------
# POST /register
# Public self-registration (no auth)
# -----------------------------------------------------
@router.post("", summary="Register as a member (pending approval)")
def register(payload: RegistrationRequest):
    client = require_supabase_client()
    return to_response(register_member(client, payload), success_status=201)


# -----------------------------------------------------
# Pickers for the registration form
# -----------------------------------------------------
@router.get("/wards", summary="Wards available for registration")
def registration_wards():
    client = require_supabase_client()
    try:
        return {"success": True, "data": list_registration_wards(client)}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch wards")


@router.get("/zones", summary="Zones of a ward, for registration")
def registration_zones(ward_id: str = Query(..., description="Ward the registrant chose")):
    client = require_supabase_client()
    try:
        return {"success": True, "data": list_registration_zones(client, ward_id)}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch zones")
