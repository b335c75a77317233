# services/audit.py

"""
Activity (audit) records.

Every mutation writes its primary change first, then one activity row. The
activity write is best-effort: failures are logged and never undo or fail the
primary change. There are no retries.
"""

from typing import Any, Optional

from supabase import Client

from core.change_feed import notify_change
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.utils import field_of, utc_now_iso


def record_activity(
    client: Client,
    actor: Any,
    activity_type: str,
    description: str,
    target_user_id: Optional[str] = None,
    target_id: Optional[str] = None,
    ward_id: Optional[str] = None,
    zone_id: Optional[str] = None,
    metadata: Optional[dict] = None,
) -> Optional[dict]:
    payload = {
        "type": str(activity_type),
        "description": description,
        "user_id": field_of(actor, "id"),
        "target_user_id": target_user_id,
        "target_id": target_id,
        "ward_id": ward_id,
        "zone_id": zone_id,
        "metadata": metadata or {},
        "created_at": utc_now_iso(),
    }

    try:
        res = client.table("activities").insert(payload).execute()
    except Exception as e:
        logger.error(f"Failed to record activity '{activity_type}': {extract_supabase_error(e)}")
        return None

    row = res.data[0] if res.data else payload
    notify_change("activities", "insert", row.get("id"))
    return row


def changed_fields(before: dict, after: dict) -> dict:
    """{field: {"from": old, "to": new}} for fields whose value changes."""
    diff = {}
    for key, new_value in after.items():
        old_value = before.get(key)
        if old_value != new_value:
            diff[key] = {"from": old_value, "to": new_value}
    return diff
