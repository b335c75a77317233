# routers/admins.py

from fastapi import APIRouter, Depends
from typing import Optional

from dependencies.auth import CurrentUser
from core.permission_helpers import requires_permission
from core.supabase_client import require_supabase_client
from core.query_builder import build_admins_query, build_candidates_query, execute_query
from core.notices import to_response
from core.errors import handle_supabase_error
from models.appointment import (
    AppointAdminRequest,
    AdminUpdate,
    AppointmentCreate,
    AppointmentAccept,
)
from routers.users import filter_users, with_actions
from services.admin_actions import (
    appoint_admin,
    update_admin,
    suspend_admin,
    activate_admin,
    revoke_admin,
    get_admin_stats,
)
from services.appointments import (
    list_appointments,
    create_appointment,
    accept_appointment,
    cancel_appointment,
)


router = APIRouter(
    prefix="/admins",
    tags=["Admin Management"],
)


# ============================================================
# LIST / STATS / CANDIDATES
# ============================================================
@router.get("", summary="Admins in the caller's scope")
def list_admins(
    search: Optional[str] = None,
    role: Optional[str] = None,
    current_user: CurrentUser = Depends(requires_permission("admins:read")),
):
    client = require_supabase_client()

    try:
        admins = execute_query(client, build_admins_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch admins")

    admins = filter_users(admins, search=search, role=role)
    return {"success": True, "data": [with_actions(current_user, a) for a in admins]}


@router.get("/stats", summary="Admin counts by role and status")
def admin_stats(current_user: CurrentUser = Depends(requires_permission("admins:read"))):
    client = require_supabase_client()

    try:
        return {"success": True, "data": get_admin_stats(client, current_user)}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to compute admin stats")


@router.get("/candidates", summary="Verified members eligible for appointment")
def appointment_candidates(
    search: Optional[str] = None,
    current_user: CurrentUser = Depends(requires_permission("admins:write")),
):
    client = require_supabase_client()

    try:
        members = execute_query(client, build_candidates_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch candidates")

    return {"success": True, "data": filter_users(members, search=search)}


# ============================================================
# APPOINT / UPDATE / STATUS / REVOKE
# ============================================================
@router.post("/appoint", summary="Appoint a verified member as admin")
def appoint(
    payload: AppointAdminRequest,
    current_user: CurrentUser = Depends(requires_permission("admins:write")),
):
    client = require_supabase_client()
    result = appoint_admin(
        client, current_user, payload.user_id, payload.role, payload.zone_id, payload.ward_id
    )
    return to_response(result)


# ============================================================
# EMAIL APPOINTMENTS
# (declared before /{user_id} routes so paths don't collide)
# ============================================================
@router.get("/appointments", summary="Appointment invitations in scope")
def get_appointments(current_user: CurrentUser = Depends(requires_permission("admins:read"))):
    client = require_supabase_client()

    try:
        return {"success": True, "data": list_appointments(client, current_user)}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch appointments")


@router.post("/appointments", summary="Invite someone to become an admin")
def post_appointment(
    payload: AppointmentCreate,
    current_user: CurrentUser = Depends(requires_permission("admins:write")),
):
    client = require_supabase_client()
    result = create_appointment(
        client,
        current_user,
        str(payload.appointee_email),
        payload.appointee_name,
        payload.role,
        payload.zone_id,
        payload.ward_id,
    )
    return to_response(result, success_status=201)


@router.post("/appointments/{appointment_id}/accept", summary="Accept an invitation (public)")
def accept(appointment_id: str, payload: AppointmentAccept):
    client = require_supabase_client()
    return to_response(accept_appointment(client, appointment_id, payload.password, payload.phone))


@router.delete("/appointments/{appointment_id}", summary="Cancel an invitation")
def cancel(
    appointment_id: str,
    current_user: CurrentUser = Depends(requires_permission("admins:write")),
):
    client = require_supabase_client()
    return to_response(cancel_appointment(client, current_user, appointment_id))


@router.patch("/{user_id}", summary="Edit an admin")
def patch_admin(
    user_id: str,
    payload: AdminUpdate,
    current_user: CurrentUser = Depends(requires_permission("admins:read")),
):
    client = require_supabase_client()
    return to_response(update_admin(client, current_user, user_id, payload.model_dump(exclude_unset=True)))


@router.post("/{user_id}/suspend", summary="Suspend an admin")
def suspend(user_id: str, current_user: CurrentUser = Depends(requires_permission("admins:read"))):
    client = require_supabase_client()
    return to_response(suspend_admin(client, current_user, user_id))


@router.post("/{user_id}/activate", summary="Reactivate a suspended admin")
def activate(user_id: str, current_user: CurrentUser = Depends(requires_permission("admins:read"))):
    client = require_supabase_client()
    return to_response(activate_admin(client, current_user, user_id))


@router.post("/{user_id}/revoke", summary="Revoke admin rights")
def revoke(user_id: str, current_user: CurrentUser = Depends(requires_permission("admins:read"))):
    client = require_supabase_client()
    return to_response(revoke_admin(client, current_user, user_id))
