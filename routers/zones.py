# routers/zones.py

from fastapi import APIRouter, HTTPException, Depends
from typing import Optional

from dependencies.auth import CurrentUser
from core.permission_helpers import requires_permission, can_manage_zone
from core.supabase_client import require_supabase_client
from core.query_builder import (
    build_users_query,
    build_zones_query,
    execute_query,
    fetch_by_id,
    fetch_wards,
)
from core.notices import to_response
from core.errors import handle_supabase_error
from models.enums import GeoAction
from models.zone import ZoneCreate, ZoneRead, ZoneUpdate
from services.geography import create_zone, update_zone, delete_zone, zone_statistics


router = APIRouter(
    prefix="/zones",
    tags=["Zones"],
)


@router.get("", summary="List Zones (role-scoped)")
def list_zones(
    ward_id: Optional[str] = None,
    current_user: CurrentUser = Depends(requires_permission("zones:read")),
):
    client = require_supabase_client()

    query = build_zones_query(current_user)
    if ward_id:
        query = query.where("ward_id", ward_id)

    try:
        zones = execute_query(client, query)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch zones")

    return {"success": True, "data": zones}


@router.get("/stats", summary="Member counts per zone")
def zones_stats(current_user: CurrentUser = Depends(requires_permission("zones:read"))):
    client = require_supabase_client()

    try:
        zones = execute_query(client, build_zones_query(current_user))
        wards = fetch_wards(client, current_user)
        users = execute_query(client, build_users_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to compute zone stats")

    return {"success": True, "data": zone_statistics(zones, wards, users)}


@router.get("/{zone_id}", response_model=ZoneRead, summary="Get Zone")
def get_zone(zone_id: str, current_user: CurrentUser = Depends(requires_permission("zones:read"))):
    client = require_supabase_client()

    try:
        zone = fetch_by_id(client, "zones", zone_id)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch zone")

    if zone is None:
        raise HTTPException(404, f"Zone '{zone_id}' not found")

    if not can_manage_zone(current_user, zone, GeoAction.view.value):
        raise HTTPException(403, "You don't have permission to view this zone")

    return zone


@router.post("", summary="Create Zone")
def post_zone(payload: ZoneCreate, current_user: CurrentUser = Depends(requires_permission("zones:read"))):
    client = require_supabase_client()
    return to_response(create_zone(client, current_user, payload.model_dump()), success_status=201)


@router.put("/{zone_id}", summary="Update Zone")
def put_zone(
    zone_id: str,
    payload: ZoneUpdate,
    current_user: CurrentUser = Depends(requires_permission("zones:read")),
):
    client = require_supabase_client()
    return to_response(update_zone(client, current_user, zone_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{zone_id}", summary="Delete Zone (unassigns its users)")
def remove_zone(zone_id: str, current_user: CurrentUser = Depends(requires_permission("zones:read"))):
    client = require_supabase_client()
    return to_response(delete_zone(client, current_user, zone_id))
