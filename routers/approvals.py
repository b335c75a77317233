# routers/approvals.py

from fastapi import APIRouter, Depends
from typing import Optional

from dependencies.auth import CurrentUser
from core.permission_helpers import requires_permission
from core.supabase_client import require_supabase_client
from core.query_builder import build_approvals_query, build_zones_query, execute_query, fetch_wards
from core.csv_export import csv_response
from core.errors import handle_supabase_error
from models.enums import ApprovalStatus
from models.user import approval_status
from routers.users import filter_users, with_actions
from services.reports import user_export_rows


router = APIRouter(
    prefix="/approvals",
    tags=["Approvals"],
)


# ============================================================
# APPROVAL QUEUE
# ============================================================
@router.get(
    "",
    summary="Registrations in the caller's scope",
    description="""
    Members only, role-scoped. Defaults to the pending queue;
    `status` selects approved or rejected registrations instead.
    """,
)
def list_approvals(
    status: Optional[ApprovalStatus] = ApprovalStatus.pending,
    search: Optional[str] = None,
    zone_id: Optional[str] = None,
    current_user: CurrentUser = Depends(requires_permission("approvals:read")),
):
    client = require_supabase_client()

    try:
        members = execute_query(client, build_approvals_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch registrations")

    members = filter_users(members, search=search, status=status, zone_id=zone_id)
    return {"success": True, "data": [with_actions(current_user, m) for m in members]}


@router.get("/summary", summary="Counts per registration status")
def approvals_summary(current_user: CurrentUser = Depends(requires_permission("approvals:read"))):
    client = require_supabase_client()

    try:
        members = execute_query(client, build_approvals_query(current_user))
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch registrations")

    counts = {s.value: 0 for s in ApprovalStatus}
    for m in members:
        counts[approval_status(m).value] += 1

    return {"success": True, "data": {"total": len(members), **counts}}


@router.get("/export", summary="Export registrations as CSV")
def export_approvals(
    status: Optional[ApprovalStatus] = ApprovalStatus.pending,
    current_user: CurrentUser = Depends(requires_permission("approvals:read")),
):
    client = require_supabase_client()

    try:
        members = execute_query(client, build_approvals_query(current_user))
        zones = execute_query(client, build_zones_query(current_user))
        wards = fetch_wards(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to export registrations")

    members = filter_users(members, status=status)
    name = f"{status.value}-registrations" if status else "registrations"
    return csv_response(user_export_rows(members, zones, wards), name)
