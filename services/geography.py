# services/geography.py

"""
Ward and zone management.

Referential rules:
  • a zone must reference an existing ward (create and move are refused otherwise)
  • deleting a zone clears zone_id on its users
  • deleting a ward deletes its zones and clears ward_id / zone_id on its users
"""

from typing import Any, List

from supabase import Client

from core.change_feed import notify_change
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.notices import ActionResult
from core.permission_helpers import can_manage_ward, can_manage_zone
from core.query_builder import fetch_by_id, fetch_all
from core.utils import field_of, sanitize, utc_now_iso
from models.enums import ActivityType, ApprovalStatus, GeoAction
from models.user import approval_status
from models.ward import WardStats
from models.zone import ZoneStats
from services.audit import record_activity, changed_fields


WARD_FIELDS = ["name", "description", "local_govt", "admin_id"]
ZONE_FIELDS = ["name", "ward_id", "description", "admin_id"]


def _pick(payload: dict, allowed: List[str]) -> dict:
    return {k: v for k, v in sanitize(payload).items() if k in allowed and v is not None}


# ============================================================
# WARDS
# ============================================================
def create_ward(client: Client, actor: Any, payload: dict) -> ActionResult:
    if not can_manage_ward(actor, None, GeoAction.create.value, []):
        return ActionResult.denied()

    data = _pick(payload, WARD_FIELDS)
    if not data.get("name"):
        return ActionResult.invalid("Ward name is required")

    now = utc_now_iso()
    data.update({"created_by": field_of(actor, "id"), "created_at": now, "updated_at": now})

    try:
        res = client.table("wards").insert(data).execute()
    except Exception as e:
        logger.error(f"Failed to create ward: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to create ward. Please try again.")

    ward = res.data[0] if res.data else data
    notify_change("wards", "insert", ward.get("id"))

    record_activity(
        client, actor, ActivityType.ward_created,
        f"Created ward {ward.get('name')}",
        target_id=ward.get("id"),
        ward_id=ward.get("id"),
        metadata={"name": ward.get("name")},
    )
    return ActionResult.success("Ward created", f"{ward.get('name')} has been created", data=ward)


def update_ward(client: Client, actor: Any, ward_id: str, payload: dict) -> ActionResult:
    changes = _pick(payload, WARD_FIELDS)
    if not changes:
        return ActionResult.invalid("No fields provided to update")

    try:
        ward = fetch_by_id(client, "wards", ward_id)
    except Exception as e:
        logger.error(f"Failed to load ward {ward_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update ward. Please try again.")

    if ward is None:
        return ActionResult.not_found("Ward")

    if not can_manage_ward(actor, ward, GeoAction.edit.value, []):
        return ActionResult.denied()

    diff = changed_fields(ward, changes)
    changes["updated_at"] = utc_now_iso()

    try:
        res = client.table("wards").update(changes).eq("id", ward_id).execute()
    except Exception as e:
        logger.error(f"Failed to update ward {ward_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update ward. Please try again.")

    updated = res.data[0] if res.data else {**ward, **changes}
    notify_change("wards", "update", ward_id)

    record_activity(
        client, actor, ActivityType.ward_updated,
        f"Updated ward {updated.get('name')}",
        target_id=ward_id,
        ward_id=ward_id,
        metadata={"changes": diff},
    )
    return ActionResult.success("Ward updated", f"{updated.get('name')} has been updated", data=updated)


def delete_ward(client: Client, actor: Any, ward_id: str) -> ActionResult:
    try:
        ward = fetch_by_id(client, "wards", ward_id)
    except Exception as e:
        logger.error(f"Failed to load ward {ward_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to delete ward. Please try again.")

    if ward is None:
        return ActionResult.not_found("Ward")

    if not can_manage_ward(actor, ward, GeoAction.delete.value, []):
        return ActionResult.denied()

    now = utc_now_iso()
    try:
        # 1) unassign users of the ward
        users_res = (
            client.table("users")
            .update({"ward_id": None, "zone_id": None, "updated_at": now})
            .eq("ward_id", ward_id)
            .execute()
        )
        # 2) remove the ward's zones
        zones_res = client.table("zones").delete().eq("ward_id", ward_id).execute()
        # 3) remove the ward
        client.table("wards").delete().eq("id", ward_id).execute()
    except Exception as e:
        logger.error(f"Failed to delete ward {ward_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to delete ward. Please try again.")

    users_unassigned = len(users_res.data or [])
    zones_removed = len(zones_res.data or [])

    notify_change("users", "update")
    notify_change("zones", "delete")
    notify_change("wards", "delete", ward_id)

    record_activity(
        client, actor, ActivityType.ward_deleted,
        f"Deleted ward {ward.get('name')}",
        target_id=ward_id,
        metadata={
            "name": ward.get("name"),
            "zones_removed": zones_removed,
            "users_unassigned": users_unassigned,
        },
    )
    return ActionResult.success(
        "Ward deleted",
        f"{ward.get('name')} and its {zones_removed} zone(s) have been deleted",
        data={"zones_removed": zones_removed, "users_unassigned": users_unassigned},
    )


# ============================================================
# ZONES
# ============================================================
def create_zone(client: Client, actor: Any, payload: dict) -> ActionResult:
    data = _pick(payload, ZONE_FIELDS)
    if not data.get("name") or not data.get("ward_id"):
        return ActionResult.invalid("Zone name and ward are required")

    if not can_manage_zone(actor, data, GeoAction.create.value):
        return ActionResult.denied()

    try:
        ward = fetch_by_id(client, "wards", data["ward_id"])
    except Exception as e:
        logger.error(f"Failed to load ward {data['ward_id']}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to create zone. Please try again.")

    if ward is None:
        return ActionResult.invalid("The selected ward does not exist")

    now = utc_now_iso()
    data.update({"created_by": field_of(actor, "id"), "created_at": now, "updated_at": now})

    try:
        res = client.table("zones").insert(data).execute()
    except Exception as e:
        logger.error(f"Failed to create zone: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to create zone. Please try again.")

    zone = res.data[0] if res.data else data
    notify_change("zones", "insert", zone.get("id"))

    record_activity(
        client, actor, ActivityType.zone_created,
        f"Created zone {zone.get('name')} in {ward.get('name')}",
        target_id=zone.get("id"),
        ward_id=zone.get("ward_id"),
        zone_id=zone.get("id"),
        metadata={"name": zone.get("name"), "ward_name": ward.get("name")},
    )
    return ActionResult.success("Zone created", f"{zone.get('name')} has been created", data=zone)


def update_zone(client: Client, actor: Any, zone_id: str, payload: dict) -> ActionResult:
    changes = _pick(payload, ZONE_FIELDS)
    if not changes:
        return ActionResult.invalid("No fields provided to update")

    try:
        zone = fetch_by_id(client, "zones", zone_id)
    except Exception as e:
        logger.error(f"Failed to load zone {zone_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update zone. Please try again.")

    if zone is None:
        return ActionResult.not_found("Zone")

    if not can_manage_zone(actor, zone, GeoAction.edit.value):
        return ActionResult.denied()

    moving = "ward_id" in changes and changes["ward_id"] != zone.get("ward_id")
    if moving:
        # Moving a zone: the destination ward must exist and be manageable too
        if not can_manage_zone(actor, {"ward_id": changes["ward_id"]}, GeoAction.edit.value):
            return ActionResult.denied()
        try:
            ward = fetch_by_id(client, "wards", changes["ward_id"])
        except Exception as e:
            logger.error(f"Failed to load ward {changes['ward_id']}: {extract_supabase_error(e)}")
            return ActionResult.failed("Failed to update zone. Please try again.")
        if ward is None:
            return ActionResult.invalid("The selected ward does not exist")

    diff = changed_fields(zone, changes)
    changes["updated_at"] = utc_now_iso()

    try:
        res = client.table("zones").update(changes).eq("id", zone_id).execute()
        if moving:
            # users follow their zone into the new ward
            client.table("users").update({
                "ward_id": changes["ward_id"],
                "updated_at": changes["updated_at"],
            }).eq("zone_id", zone_id).execute()
    except Exception as e:
        logger.error(f"Failed to update zone {zone_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update zone. Please try again.")

    updated = res.data[0] if res.data else {**zone, **changes}
    notify_change("zones", "update", zone_id)
    if moving:
        notify_change("users", "update")

    record_activity(
        client, actor, ActivityType.zone_updated,
        f"Updated zone {updated.get('name')}",
        target_id=zone_id,
        ward_id=updated.get("ward_id"),
        zone_id=zone_id,
        metadata={"changes": diff},
    )
    return ActionResult.success("Zone updated", f"{updated.get('name')} has been updated", data=updated)


def delete_zone(client: Client, actor: Any, zone_id: str) -> ActionResult:
    try:
        zone = fetch_by_id(client, "zones", zone_id)
    except Exception as e:
        logger.error(f"Failed to load zone {zone_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to delete zone. Please try again.")

    if zone is None:
        return ActionResult.not_found("Zone")

    if not can_manage_zone(actor, zone, GeoAction.delete.value):
        return ActionResult.denied()

    try:
        users_res = (
            client.table("users")
            .update({"zone_id": None, "updated_at": utc_now_iso()})
            .eq("zone_id", zone_id)
            .execute()
        )
        client.table("zones").delete().eq("id", zone_id).execute()
    except Exception as e:
        logger.error(f"Failed to delete zone {zone_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to delete zone. Please try again.")

    users_unassigned = len(users_res.data or [])
    notify_change("users", "update")
    notify_change("zones", "delete", zone_id)

    record_activity(
        client, actor, ActivityType.zone_deleted,
        f"Deleted zone {zone.get('name')}",
        target_id=zone_id,
        ward_id=zone.get("ward_id"),
        metadata={"name": zone.get("name"), "users_unassigned": users_unassigned},
    )
    return ActionResult.success(
        "Zone deleted",
        f"{zone.get('name')} has been deleted",
        data={"users_unassigned": users_unassigned},
    )


# ============================================================
# STATISTICS
# ============================================================
def _rate(part: int, total: int) -> int:
    return round(part / total * 100) if total else 0


def ward_statistics(wards: List[dict], zones: List[dict], users: List[dict]) -> List[WardStats]:
    stats = []
    for ward in wards:
        ward_users = [u for u in users if u.get("ward_id") == ward.get("id")]
        verified = sum(1 for u in ward_users if approval_status(u) == ApprovalStatus.approved)
        pending = sum(1 for u in ward_users if approval_status(u) == ApprovalStatus.pending)
        stats.append(WardStats(
            ward_id=ward.get("id"),
            name=ward.get("name") or "",
            total_zones=sum(1 for z in zones if z.get("ward_id") == ward.get("id")),
            total_users=len(ward_users),
            verified_users=verified,
            pending_users=pending,
            approval_rate=_rate(verified, len(ward_users)),
        ))
    return stats


def zone_statistics(zones: List[dict], wards: List[dict], users: List[dict]) -> List[ZoneStats]:
    ward_names = {w.get("id"): w.get("name") for w in wards}
    stats = []
    for zone in zones:
        zone_users = [u for u in users if u.get("zone_id") == zone.get("id")]
        verified = sum(1 for u in zone_users if approval_status(u) == ApprovalStatus.approved)
        pending = sum(1 for u in zone_users if approval_status(u) == ApprovalStatus.pending)
        stats.append(ZoneStats(
            zone_id=zone.get("id"),
            name=zone.get("name") or "",
            ward_id=zone.get("ward_id"),
            ward_name=ward_names.get(zone.get("ward_id")),
            total_users=len(zone_users),
            verified_users=verified,
            pending_users=pending,
            approval_rate=_rate(verified, len(zone_users)),
        ))
    return stats


def list_registration_wards(client: Client) -> List[dict]:
    """Public picker: every ward (registration happens before any scoping)."""
    return fetch_all(client, "wards")


def list_registration_zones(client: Client, ward_id: str) -> List[dict]:
    res = client.table("zones").select("*").eq("ward_id", ward_id).order("name").execute()
    return res.data or []
