# services/reports.py

from datetime import datetime, timedelta
from typing import Any, List, Optional

from supabase import Client

from core.query_builder import build_users_query, build_zones_query, execute_query, fetch_wards
from core.utils import parse_timestamp, utc_now
from models.enums import ADMIN_ROLES, ApprovalStatus, ReportType
from models.user import approval_status
from services.geography import ward_statistics, zone_statistics


USER_EXPORT_COLUMNS = [
    "Name", "Email", "Phone", "ID Number", "Role",
    "Ward", "Zone", "Status", "Application Date", "Address",
]


def _rate(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


def load_report_data(client: Client, actor: Any):
    users = execute_query(client, build_users_query(actor))
    zones = execute_query(client, build_zones_query(actor))
    wards = fetch_wards(client, actor)
    return users, zones, wards


# ============================================================
# SUMMARY
# ============================================================
def build_summary(
    users: List[dict],
    zones: List[dict],
    wards: List[dict],
    now: Optional[datetime] = None,
) -> dict:
    now = now or utc_now()
    month_ago = now - timedelta(days=30)

    total = len(users)
    verified = sum(1 for u in users if approval_status(u) == ApprovalStatus.approved)
    rejected = sum(1 for u in users if approval_status(u) == ApprovalStatus.rejected)
    recent = 0
    for u in users:
        created = parse_timestamp(u.get("created_at"))
        if created is not None and created >= month_ago:
            recent += 1

    return {
        "total_users": total,
        "verified_users": verified,
        "pending_users": total - verified - rejected,
        "rejected_users": rejected,
        "admin_users": sum(1 for u in users if u.get("role") in ADMIN_ROLES),
        "total_zones": len(zones),
        "total_wards": len(wards),
        "growth_rate": _rate(recent, total),
        "approval_rate": _rate(verified, total),
        "zone_performance": [s.model_dump() for s in zone_statistics(zones, wards, users)],
        "ward_performance": [s.model_dump() for s in ward_statistics(wards, zones, users)],
        "approval_trends": approval_trends(users, now),
    }


def approval_trends(users: List[dict], now: Optional[datetime] = None, days: int = 7) -> List[dict]:
    """Approvals per day for the last `days` days, oldest first."""
    now = now or utc_now()
    counts = {}
    for u in users:
        verified_at = parse_timestamp(u.get("verified_at"))
        if verified_at is not None and approval_status(u) == ApprovalStatus.approved:
            key = verified_at.date().isoformat()
            counts[key] = counts.get(key, 0) + 1

    trends = []
    for offset in range(days - 1, -1, -1):
        day = (now - timedelta(days=offset)).date().isoformat()
        trends.append({"date": day, "approvals": counts.get(day, 0)})
    return trends


# ============================================================
# CSV ROWS
# ============================================================
def user_export_row(user: dict, zone_names: dict, ward_names: dict) -> dict:
    created = parse_timestamp(user.get("created_at"))
    return {
        "Name": user.get("name") or "",
        "Email": user.get("email") or "",
        "Phone": user.get("phone") or "",
        "ID Number": user.get("id_number") or "",
        "Role": user.get("role") or "",
        "Ward": ward_names.get(user.get("ward_id"), ""),
        "Zone": zone_names.get(user.get("zone_id"), ""),
        "Status": approval_status(user).value,
        "Application Date": created.date().isoformat() if created else "",
        "Address": user.get("address") or "",
    }


def user_export_rows(users: List[dict], zones: List[dict], wards: List[dict]) -> List[dict]:
    zone_names = {z.get("id"): z.get("name") for z in zones}
    ward_names = {w.get("id"): w.get("name") for w in wards}
    return [user_export_row(u, zone_names, ward_names) for u in users]


def report_rows(report_type: ReportType, users: List[dict], zones: List[dict], wards: List[dict]) -> List[dict]:
    if report_type == ReportType.all_users:
        return user_export_rows(users, zones, wards)
    if report_type == ReportType.verified_users:
        selected = [u for u in users if approval_status(u) == ApprovalStatus.approved]
        return user_export_rows(selected, zones, wards)
    if report_type == ReportType.pending_users:
        selected = [u for u in users if approval_status(u) == ApprovalStatus.pending]
        return user_export_rows(selected, zones, wards)
    if report_type == ReportType.admin_users:
        selected = [u for u in users if u.get("role") in ADMIN_ROLES]
        return user_export_rows(selected, zones, wards)

    if report_type == ReportType.zone_performance:
        return [
            {
                "Zone": s.name,
                "Ward": s.ward_name or "",
                "Total Users": s.total_users,
                "Verified": s.verified_users,
                "Pending": s.pending_users,
                "Approval Rate (%)": s.approval_rate,
            }
            for s in zone_statistics(zones, wards, users)
        ]

    if report_type == ReportType.ward_performance:
        return [
            {
                "Ward": s.name,
                "Zones": s.total_zones,
                "Total Users": s.total_users,
                "Verified": s.verified_users,
                "Pending": s.pending_users,
                "Approval Rate (%)": s.approval_rate,
            }
            for s in ward_statistics(wards, zones, users)
        ]

    return []
