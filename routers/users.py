# routers/users.py

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional, List

from dependencies.auth import get_current_user, CurrentUser
from core.permission_helpers import requires_permission, can_perform_action, get_allowed_actions
from core.supabase_client import require_supabase_client
from core.query_builder import build_users_query, execute_query, fetch_by_id
from core.notices import to_response
from core.csv_export import csv_response
from core.errors import handle_supabase_error
from models.enums import Action, ApprovalStatus
from models.user import (
    UserUpdate,
    UserWithActions,
    RejectRequest,
    ReassignRequest,
    approval_status,
)
from services.user_actions import (
    approve_user,
    reject_user,
    reassign_user,
    update_user,
    delete_user,
)
from services.reports import user_export_rows, load_report_data


router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def with_actions(actor: CurrentUser, user: dict) -> dict:
    """Attach the derived status and the action menu the caller may render."""
    return {
        **user,
        "approval_status": approval_status(user).value,
        "allowed_actions": get_allowed_actions(actor, user),
    }


def filter_users(
    users: List[dict],
    search: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[ApprovalStatus] = None,
    zone_id: Optional[str] = None,
    ward_id: Optional[str] = None,
) -> List[dict]:
    """Client-side narrowing on top of the role-scoped query."""
    term = search.strip().lower() if search else None
    result = []
    for u in users:
        if term and not any(
            term in str(u.get(f) or "").lower() for f in ("name", "email", "phone", "id_number")
        ):
            continue
        if role and u.get("role") != role:
            continue
        if status and approval_status(u) != status:
            continue
        if zone_id and u.get("zone_id") != zone_id:
            continue
        if ward_id and u.get("ward_id") != ward_id:
            continue
        result.append(u)
    return result


# ============================================================
# LIST USERS (role-scoped)
# ============================================================
@router.get(
    "",
    summary="List Users",
    description="""
    Users visible to the caller: all for superAdmin, the caller's ward for
    wardAdmin, the caller's zone for zonalAdmin. Each row carries
    `approval_status` and `allowed_actions`.

    **Permissions:** Requires `users:read` permission.
    """,
    dependencies=[Depends(requires_permission("users:read"))],
)
def list_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[ApprovalStatus] = None,
    zone_id: Optional[str] = None,
    ward_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = require_supabase_client()

    try:
        users = execute_query(client, build_users_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch users")

    users = filter_users(users, search, role, status, zone_id, ward_id)
    return {"success": True, "data": [with_actions(current_user, u) for u in users]}


# ============================================================
# EXPORT USERS (CSV)
# ============================================================
@router.get(
    "/export",
    summary="Export visible users as CSV",
    dependencies=[Depends(requires_permission("users:read"))],
)
def export_users(
    search: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[ApprovalStatus] = None,
    zone_id: Optional[str] = None,
    ward_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = require_supabase_client()

    try:
        users, zones, wards = load_report_data(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to export users")

    users = filter_users(users, search, role, status, zone_id, ward_id)
    return csv_response(user_export_rows(users, zones, wards), "users")


# ============================================================
# GET USER
# ============================================================
@router.get(
    "/{user_id}",
    response_model=UserWithActions,
    summary="Get User",
    dependencies=[Depends(requires_permission("users:read"))],
)
def get_user(user_id: str, current_user: CurrentUser = Depends(get_current_user)):
    client = require_supabase_client()

    try:
        user = fetch_by_id(client, "users", user_id)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch user")

    if user is None:
        raise HTTPException(404, f"User '{user_id}' not found")

    if not can_perform_action(current_user, user, Action.view.value):
        raise HTTPException(403, "You don't have permission to view this user")

    return with_actions(current_user, user)


# ============================================================
# UPDATE USER
# ============================================================
@router.patch("/{user_id}", summary="Edit a user's details")
def patch_user(
    user_id: str,
    payload: UserUpdate,
    current_user: CurrentUser = Depends(requires_permission("users:read")),
):
    client = require_supabase_client()
    return to_response(update_user(client, current_user, user_id, payload.model_dump(exclude_unset=True)))


# ============================================================
# APPROVAL WORKFLOW
# ============================================================
@router.post("/{user_id}/approve", summary="Approve a registration")
def approve(user_id: str, current_user: CurrentUser = Depends(requires_permission("approvals:read"))):
    client = require_supabase_client()
    return to_response(approve_user(client, current_user, user_id))


@router.post("/{user_id}/reject", summary="Reject a registration")
def reject(
    user_id: str,
    payload: RejectRequest,
    current_user: CurrentUser = Depends(requires_permission("approvals:read")),
):
    client = require_supabase_client()
    return to_response(reject_user(client, current_user, user_id, payload.reason))


@router.post("/{user_id}/reassign", summary="Move a user to another zone")
def reassign(
    user_id: str,
    payload: ReassignRequest,
    current_user: CurrentUser = Depends(requires_permission("users:read")),
):
    client = require_supabase_client()
    return to_response(reassign_user(client, current_user, user_id, payload.zone_id, payload.ward_id))


# ============================================================
# DELETE USER
# ============================================================
@router.delete("/{user_id}", summary="Delete a user")
def remove_user(user_id: str, current_user: CurrentUser = Depends(requires_permission("users:read"))):
    client = require_supabase_client()
    return to_response(delete_user(client, current_user, user_id))
