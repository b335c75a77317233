# services/admin_actions.py

"""
Admin lifecycle:

    member --appoint--> zonalAdmin | wardAdmin (status active)
    active --suspend--> suspended --activate--> active
    any admin state --revoke--> member (zone_id, ward_id, appointed_by cleared)

Operations write final field values only, so repeating one is harmless.
"""

from typing import Any, Optional

from supabase import Client

from core.errors import extract_supabase_error
from core.hierarchy import get_accessible_zones, get_accessible_wards, find_by_id, zone_belongs_to_ward
from core.logging_config import logger
from core.notices import ActionResult
from core.permission_helpers import can_perform_action, can_appoint
from core.query_builder import (
    build_admins_query,
    build_appointments_query,
    execute_query,
    fetch_all,
)
from core.utils import field_of, sanitize, utc_now_iso
from models.appointment import AdminStats
from models.enums import (
    Action,
    ActivityType,
    AccountStatus,
    Role,
    APPOINTABLE_ROLES,
    OPEN_APPOINTMENT_STATUSES,
    ROLE_LABELS,
)
from services.audit import record_activity, changed_fields
from services.user_actions import display_name, load_user, save_user_changes


def resolve_appointment_scope(
    role: Optional[str],
    zone_id: Optional[str],
    ward_id: Optional[str],
    zones: list,
    wards: list,
):
    """
    Validate the geography of an appointment.
    Returns (zone_id, ward_id, error). A zonalAdmin's ward is derived
    from its zone; a wardAdmin needs a ward and no zone.
    """
    if role not in APPOINTABLE_ROLES:
        return None, None, ActionResult.invalid("Please select a valid admin role")

    if role == Role.zonal_admin.value:
        if not zone_id:
            return None, None, ActionResult.invalid("Please select a zone for the zonal admin")
        zone = find_by_id(zones, zone_id)
        if zone is None:
            return None, None, ActionResult.not_found("Zone")
        if ward_id and zone.get("ward_id") != ward_id:
            return None, None, ActionResult.invalid("The selected zone does not belong to the selected ward")
        return zone_id, zone.get("ward_id"), None

    if not ward_id:
        return None, None, ActionResult.invalid("Please select a ward for the ward admin")
    if find_by_id(wards, ward_id) is None:
        return None, None, ActionResult.not_found("Ward")
    return None, ward_id, None


# ============================================================
# APPOINT (existing verified member)
# ============================================================
def appoint_admin(
    client: Client,
    actor: Any,
    user_id: Optional[str],
    role: Optional[str],
    zone_id: Optional[str] = None,
    ward_id: Optional[str] = None,
) -> ActionResult:
    if not user_id or not role:
        return ActionResult.invalid("Please select a user and a role")

    target, error = load_user(client, user_id)
    if error:
        return error

    try:
        zones = fetch_all(client, "zones")
        wards = fetch_all(client, "wards")
    except Exception as e:
        logger.error(f"Failed to load geography for appointment: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to appoint admin. Please try again.")

    zone_id, ward_id, error = resolve_appointment_scope(role, zone_id, ward_id, zones, wards)
    if error:
        return error

    if target.get("role") != Role.member.value or target.get("verified") is not True:
        return ActionResult.invalid("Only verified members can be appointed as admins")

    if not can_appoint(actor, target, role, zone_id, ward_id, zones):
        return ActionResult.denied()

    now = utc_now_iso()
    try:
        updated = save_user_changes(client, target, {
            "role": role,
            "zone_id": zone_id,
            "ward_id": ward_id,
            "status": AccountStatus.active.value,
            "appointed_by": field_of(actor, "id"),
            "appointed_at": now,
        })
    except Exception as e:
        logger.error(f"Failed to appoint {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to appoint admin. Please try again.")

    name = display_name(target)
    label = ROLE_LABELS.get(role, role)
    record_activity(
        client, actor, ActivityType.admin_appointed,
        f"Appointed {name} as {label}",
        target_user_id=user_id,
        ward_id=ward_id,
        zone_id=zone_id,
        metadata={
            "user_name": name,
            "previous_role": target.get("role"),
            "new_role": role,
            "zone_id": zone_id,
            "ward_id": ward_id,
        },
    )

    return ActionResult.success("Admin appointed", f"{name} is now a {label}", data=updated)


# ============================================================
# UPDATE ADMIN RECORD
# ============================================================
ADMIN_EDITABLE_FIELDS = ["name", "phone", "address", "zone_id", "ward_id"]


def update_admin(client: Client, actor: Any, user_id: str, payload: dict) -> ActionResult:
    changes = {
        k: v for k, v in sanitize(payload).items()
        if k in ADMIN_EDITABLE_FIELDS and v is not None
    }
    if not changes:
        return ActionResult.invalid("No fields provided to update")

    target, error = load_user(client, user_id)
    if error:
        return error

    if not can_perform_action(actor, target, Action.edit.value):
        return ActionResult.denied()

    # Moving an admin: the new zone / ward must be visible to the actor
    if "zone_id" in changes or "ward_id" in changes:
        try:
            zones = fetch_all(client, "zones")
            wards = fetch_all(client, "wards")
        except Exception as e:
            logger.error(f"Failed to load geography: {extract_supabase_error(e)}")
            return ActionResult.failed("Failed to update admin. Please try again.")

        new_zone_id = changes.get("zone_id", target.get("zone_id"))
        new_ward_id = changes.get("ward_id", target.get("ward_id"))

        if target.get("role") == Role.zonal_admin.value or "zone_id" in changes:
            zone = find_by_id(zones, new_zone_id)
            if zone is None:
                return ActionResult.not_found("Zone")
            if not get_accessible_zones(actor, [zone]):
                return ActionResult.denied("You can only assign zones within your own area")
            # ward follows the zone
            new_ward_id = zone.get("ward_id")
        elif new_zone_id and not zone_belongs_to_ward(new_zone_id, new_ward_id, zones):
            # ward-only move: a zone from the old ward does not come along
            new_zone_id = None

        ward = find_by_id(wards, new_ward_id)
        if ward is None:
            return ActionResult.not_found("Ward")
        if not get_accessible_wards(actor, [ward], zones):
            return ActionResult.denied("You can only assign wards within your own area")

        changes["zone_id"] = new_zone_id
        changes["ward_id"] = new_ward_id

    diff = changed_fields(target, changes)

    try:
        updated = save_user_changes(client, target, changes)
    except Exception as e:
        logger.error(f"Failed to update admin {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update admin. Please try again.")

    name = display_name(updated)
    record_activity(
        client, actor, ActivityType.admin_updated,
        f"Updated admin {name}",
        target_user_id=user_id,
        ward_id=updated.get("ward_id"),
        zone_id=updated.get("zone_id"),
        metadata={"changes": diff},
    )

    return ActionResult.success("Admin updated", f"{name} has been updated", data=updated)


# ============================================================
# STATUS CHANGES (suspend / activate)
# ============================================================
def _set_admin_status(
    client: Client,
    actor: Any,
    user_id: str,
    action: str,
    new_status: str,
    activity_type: ActivityType,
    verb: str,
) -> ActionResult:
    target, error = load_user(client, user_id)
    if error:
        return error

    if target.get("role") not in APPOINTABLE_ROLES:
        return ActionResult.invalid(f"Only ward and zonal admins can be {verb}")

    if not can_perform_action(actor, target, action):
        return ActionResult.denied()

    try:
        updated = save_user_changes(client, target, {"status": new_status})
    except Exception as e:
        logger.error(f"Failed to {action} admin {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed(f"Failed to {action} admin. Please try again.")

    name = display_name(target)
    record_activity(
        client, actor, activity_type,
        f"{verb.capitalize()} admin {name}",
        target_user_id=user_id,
        ward_id=target.get("ward_id"),
        zone_id=target.get("zone_id"),
        metadata={
            "user_name": name,
            "previous_status": target.get("status"),
            "new_status": new_status,
        },
    )

    return ActionResult.success(f"Admin {verb}", f"{name} has been {verb}", data=updated)


def suspend_admin(client: Client, actor: Any, user_id: str) -> ActionResult:
    return _set_admin_status(
        client, actor, user_id,
        Action.suspend.value, AccountStatus.suspended.value,
        ActivityType.admin_suspended, "suspended",
    )


def activate_admin(client: Client, actor: Any, user_id: str) -> ActionResult:
    return _set_admin_status(
        client, actor, user_id,
        Action.activate.value, AccountStatus.active.value,
        ActivityType.admin_activated, "activated",
    )


# ============================================================
# REVOKE (back to member)
# ============================================================
def revoke_admin(client: Client, actor: Any, user_id: str) -> ActionResult:
    target, error = load_user(client, user_id)
    if error:
        return error

    if target.get("role") not in APPOINTABLE_ROLES:
        return ActionResult.invalid("Only ward and zonal admins can be revoked")

    if not can_perform_action(actor, target, Action.revoke.value):
        return ActionResult.denied()

    try:
        updated = save_user_changes(client, target, {
            "role": Role.member.value,
            "zone_id": None,
            "ward_id": None,
            "appointed_by": None,
            "appointed_at": None,
            "status": AccountStatus.active.value,
        })
    except Exception as e:
        logger.error(f"Failed to revoke admin {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to revoke admin. Please try again.")

    name = display_name(target)
    record_activity(
        client, actor, ActivityType.admin_revoked,
        f"Revoked admin rights from {name}",
        target_user_id=user_id,
        ward_id=target.get("ward_id"),
        zone_id=target.get("zone_id"),
        metadata={
            "user_name": name,
            "previous_role": target.get("role"),
            "previous_zone_id": target.get("zone_id"),
            "previous_ward_id": target.get("ward_id"),
        },
    )

    return ActionResult.success("Admin revoked", f"{name} is now a regular member", data=updated)


# ============================================================
# STATS
# ============================================================
def get_admin_stats(client: Client, actor: Any) -> AdminStats:
    """Scoped counts. Supabase errors propagate to the router."""
    admins = execute_query(client, build_admins_query(actor))
    appointments = execute_query(client, build_appointments_query(actor))

    def count_role(role: str) -> int:
        return sum(1 for a in admins if a.get("role") == role)

    return AdminStats(
        total_admins=len(admins),
        super_admins=count_role(Role.super_admin.value),
        ward_admins=count_role(Role.ward_admin.value),
        zonal_admins=count_role(Role.zonal_admin.value),
        active_admins=sum(1 for a in admins if a.get("status") == AccountStatus.active.value),
        suspended_admins=sum(1 for a in admins if a.get("status") == AccountStatus.suspended.value),
        pending_appointments=sum(1 for a in appointments if a.get("status") in OPEN_APPOINTMENT_STATUSES),
    )
