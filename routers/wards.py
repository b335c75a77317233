# routers/wards.py

from fastapi import APIRouter, HTTPException, Depends

from dependencies.auth import CurrentUser
from core.permission_helpers import requires_permission, can_manage_ward
from core.supabase_client import require_supabase_client
from core.query_builder import (
    build_users_query,
    build_zones_query,
    execute_query,
    fetch_by_id,
    fetch_wards,
    load_actor_zone,
)
from core.notices import to_response
from core.errors import handle_supabase_error
from models.enums import GeoAction
from models.ward import WardCreate, WardRead, WardUpdate
from services.geography import create_ward, update_ward, delete_ward, ward_statistics


router = APIRouter(
    prefix="/wards",
    tags=["Wards"],
)


# ============================================================
# LIST WARDS (role-scoped)
# ============================================================
@router.get(
    "",
    summary="List Wards",
    description="""
    All wards for superAdmin; the caller's own ward for wardAdmin;
    the ward owning the caller's zone for zonalAdmin.

    **Permissions:** Requires `wards:read` permission.
    """,
)
def list_wards(current_user: CurrentUser = Depends(requires_permission("wards:read"))):
    client = require_supabase_client()

    try:
        wards = fetch_wards(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch wards")

    return {"success": True, "data": wards}


@router.get("/stats", summary="Zone and member counts per ward")
def wards_stats(current_user: CurrentUser = Depends(requires_permission("wards:read"))):
    client = require_supabase_client()

    try:
        wards = fetch_wards(client, current_user)
        zones = execute_query(client, build_zones_query(current_user))
        users = execute_query(client, build_users_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to compute ward stats")

    return {"success": True, "data": ward_statistics(wards, zones, users)}


# ============================================================
# GET WARD
# ============================================================
@router.get("/{ward_id}", response_model=WardRead, summary="Get Ward")
def get_ward(ward_id: str, current_user: CurrentUser = Depends(requires_permission("wards:read"))):
    client = require_supabase_client()

    try:
        ward = fetch_by_id(client, "wards", ward_id)
        actor_zone = load_actor_zone(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch ward")

    if ward is None:
        raise HTTPException(404, f"Ward '{ward_id}' not found")

    zones = [actor_zone] if actor_zone else []
    if not can_manage_ward(current_user, ward, GeoAction.view.value, zones):
        raise HTTPException(403, "You don't have permission to view this ward")

    return ward


# ============================================================
# CREATE / UPDATE / DELETE
# ============================================================
@router.post("", summary="Create Ward")
def post_ward(payload: WardCreate, current_user: CurrentUser = Depends(requires_permission("wards:read"))):
    client = require_supabase_client()
    return to_response(create_ward(client, current_user, payload.model_dump()), success_status=201)


@router.put("/{ward_id}", summary="Update Ward")
def put_ward(
    ward_id: str,
    payload: WardUpdate,
    current_user: CurrentUser = Depends(requires_permission("wards:read")),
):
    client = require_supabase_client()
    return to_response(update_ward(client, current_user, ward_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{ward_id}", summary="Delete Ward (cascades to its zones)")
def remove_ward(ward_id: str, current_user: CurrentUser = Depends(requires_permission("wards:read"))):
    client = require_supabase_client()
    return to_response(delete_ward(client, current_user, ward_id))
