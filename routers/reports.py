# routers/reports.py

from fastapi import APIRouter, Depends

from dependencies.auth import CurrentUser
from core.permission_helpers import requires_permission
from core.supabase_client import require_supabase_client
from core.csv_export import csv_response
from core.errors import handle_supabase_error
from models.enums import ReportType
from services.reports import build_summary, load_report_data, report_rows


router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
)


# ============================================================
# SUMMARY
# ============================================================
@router.get(
    "/summary",
    summary="Registration summary for the caller's scope",
    description="""
    Totals, growth rate (registrations in the last 30 days over the total),
    approval rate, per-zone and per-ward performance and a 7-day approval trend.
    """,
)
def reports_summary(current_user: CurrentUser = Depends(requires_permission("reports:read"))):
    client = require_supabase_client()

    try:
        users, zones, wards = load_report_data(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to build report")

    return {"success": True, "data": build_summary(users, zones, wards)}


# ============================================================
# CSV EXPORT
# ============================================================
@router.get("/export/{report_type}", summary="Download a report as CSV")
def export_report(
    report_type: ReportType,
    current_user: CurrentUser = Depends(requires_permission("reports:read")),
):
    client = require_supabase_client()

    try:
        users, zones, wards = load_report_data(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to export report")

    return csv_response(report_rows(report_type, users, zones, wards), report_type.value)
