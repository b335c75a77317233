# services/user_actions.py

"""
Registrant / member mutations: approve, reject, reassign, edit, delete.

Each operation: load target → predicate → primary write → activity record.
Expected failures come back as ActionResult, never as exceptions.
"""

from typing import Any, Optional, Tuple

from supabase import Client

from core.change_feed import notify_change
from core.errors import extract_supabase_error
from core.hierarchy import get_accessible_zones
from core.logging_config import logger
from core.notices import ActionResult
from core.permission_helpers import can_perform_action
from core.query_builder import fetch_by_id
from core.utils import field_of, sanitize, utc_now_iso
from models.enums import Action, ActivityType, Role
from models.user import approval_status
from services.audit import record_activity, changed_fields


EDITABLE_PROFILE_FIELDS = [
    "name", "phone", "address", "id_number", "id_type",
    "dob", "occupation", "qualification", "local_govt",
]


# ============================================================
# Shared helpers (also used by admin_actions)
# ============================================================
def display_name(user: Any) -> str:
    return field_of(user, "name") or field_of(user, "email") or "Unknown user"


def load_user(client: Client, user_id: str) -> Tuple[Optional[dict], Optional[ActionResult]]:
    try:
        row = fetch_by_id(client, "users", user_id)
    except Exception as e:
        logger.error(f"Failed to load user {user_id}: {extract_supabase_error(e)}")
        return None, ActionResult.failed("Failed to load user. Please try again.")

    if row is None:
        return None, ActionResult.not_found("User")
    return row, None


def save_user_changes(client: Client, target: dict, changes: dict) -> dict:
    """Primary write. Merges updated_at. Raises on Supabase errors."""
    changes = {**changes, "updated_at": utc_now_iso()}
    res = (
        client.table("users")
        .update(changes)
        .eq("id", target["id"])
        .execute()
    )
    notify_change("users", "update", target["id"])
    return res.data[0] if res.data else {**target, **changes}


# ============================================================
# APPROVE
# ============================================================
def approve_user(client: Client, actor: Any, user_id: str) -> ActionResult:
    target, error = load_user(client, user_id)
    if error:
        return error

    if not can_perform_action(actor, target, Action.approve.value):
        return ActionResult.denied()

    now = utc_now_iso()
    try:
        updated = save_user_changes(client, target, {
            "verified": True,
            "verified_at": now,
            "approved_by": field_of(actor, "id"),
            "rejection_reason": None,
        })
    except Exception as e:
        logger.error(f"Failed to approve user {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to approve user. Please try again.")

    name = display_name(target)
    record_activity(
        client, actor, ActivityType.user_approved,
        f"Approved registration for {name}",
        target_user_id=user_id,
        ward_id=updated.get("ward_id"),
        zone_id=updated.get("zone_id"),
        metadata={
            "user_name": name,
            "user_email": target.get("email"),
            "previous_status": approval_status(target).value,
        },
    )

    return ActionResult.success("User approved", f"{name} has been approved successfully", data=updated)


# ============================================================
# REJECT
# ============================================================
def reject_user(client: Client, actor: Any, user_id: str, reason: Optional[str]) -> ActionResult:
    reason = (reason or "").strip()
    if not reason:
        return ActionResult.invalid("Please provide a reason for rejection")

    target, error = load_user(client, user_id)
    if error:
        return error

    if not can_perform_action(actor, target, Action.reject.value):
        return ActionResult.denied()

    try:
        updated = save_user_changes(client, target, {
            "verified": False,
            "rejection_reason": reason,
            "rejected_by": field_of(actor, "id"),
            "rejected_at": utc_now_iso(),
        })
    except Exception as e:
        logger.error(f"Failed to reject user {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to reject user. Please try again.")

    name = display_name(target)
    record_activity(
        client, actor, ActivityType.user_rejected,
        f"Rejected registration for {name}",
        target_user_id=user_id,
        ward_id=updated.get("ward_id"),
        zone_id=updated.get("zone_id"),
        metadata={
            "user_name": name,
            "user_email": target.get("email"),
            "rejection_reason": reason,
        },
    )

    return ActionResult.success("User rejected", f"{name} has been rejected", data=updated)


# ============================================================
# REASSIGN (zone / ward)
# ============================================================
def reassign_user(
    client: Client,
    actor: Any,
    user_id: str,
    zone_id: Optional[str],
    ward_id: Optional[str],
) -> ActionResult:
    """Moves a user to another zone. Approval classification is untouched."""
    if not zone_id or not ward_id:
        return ActionResult.invalid("Please select both a ward and a zone")

    target, error = load_user(client, user_id)
    if error:
        return error

    if not can_perform_action(actor, target, Action.reassign.value):
        return ActionResult.denied()

    try:
        zone = fetch_by_id(client, "zones", zone_id)
        ward = fetch_by_id(client, "wards", ward_id)
    except Exception as e:
        logger.error(f"Failed to load reassignment target: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to reassign user. Please try again.")

    if zone is None:
        return ActionResult.not_found("Zone")
    if ward is None:
        return ActionResult.not_found("Ward")
    if zone.get("ward_id") != ward_id:
        return ActionResult.invalid("The selected zone does not belong to the selected ward")

    # Destination must be inside the actor's own scope
    if not get_accessible_zones(actor, [zone]):
        return ActionResult.denied("You can only reassign users within your own area")

    old_zone_id = target.get("zone_id")
    old_ward_id = target.get("ward_id")

    try:
        updated = save_user_changes(client, target, {
            "zone_id": zone_id,
            "ward_id": ward_id,
            "reassigned_by": field_of(actor, "id"),
            "reassigned_at": utc_now_iso(),
        })
    except Exception as e:
        logger.error(f"Failed to reassign user {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to reassign user. Please try again.")

    name = display_name(target)
    record_activity(
        client, actor, ActivityType.user_reassigned,
        f"Reassigned {name} to {zone.get('name')} - {ward.get('name')}",
        target_user_id=user_id,
        ward_id=ward_id,
        zone_id=zone_id,
        metadata={
            "user_name": name,
            "old_zone_id": old_zone_id,
            "old_ward_id": old_ward_id,
            "new_zone_id": zone_id,
            "new_ward_id": ward_id,
        },
    )

    return ActionResult.success(
        "User reassigned",
        f"{name} has been reassigned to {zone.get('name')}",
        data=updated,
    )


# ============================================================
# EDIT PROFILE FIELDS
# ============================================================
def update_user(client: Client, actor: Any, user_id: str, payload: dict) -> ActionResult:
    changes = {
        k: v for k, v in sanitize(payload).items()
        if k in EDITABLE_PROFILE_FIELDS and v is not None
    }
    if not changes:
        return ActionResult.invalid("No fields provided to update")

    target, error = load_user(client, user_id)
    if error:
        return error

    if not can_perform_action(actor, target, Action.edit.value):
        return ActionResult.denied()

    diff = changed_fields(target, changes)

    try:
        updated = save_user_changes(client, target, changes)
    except Exception as e:
        logger.error(f"Failed to update user {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update user. Please try again.")

    name = display_name(updated)
    record_activity(
        client, actor, ActivityType.user_updated,
        f"Updated details for {name}",
        target_user_id=user_id,
        ward_id=updated.get("ward_id"),
        zone_id=updated.get("zone_id"),
        metadata={"changes": diff},
    )

    return ActionResult.success("User updated", f"{name} has been updated", data=updated)


# ============================================================
# DELETE
# ============================================================
def count_super_admins(client: Client) -> int:
    res = client.table("users").select("id").eq("role", Role.super_admin.value).execute()
    return len(res.data or [])


def delete_user(client: Client, actor: Any, user_id: str) -> ActionResult:
    target, error = load_user(client, user_id)
    if error:
        return error

    if not can_perform_action(actor, target, Action.delete.value):
        return ActionResult.denied()

    try:
        if target.get("role") == Role.super_admin.value and count_super_admins(client) <= 1:
            return ActionResult.invalid("Cannot delete the last remaining superAdmin")

        client.table("users").delete().eq("id", user_id).execute()
    except Exception as e:
        logger.error(f"Failed to delete user {user_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to delete user. Please try again.")

    notify_change("users", "delete", user_id)

    name = display_name(target)
    record_activity(
        client, actor, ActivityType.user_deleted,
        f"Deleted user {name}",
        target_user_id=user_id,
        ward_id=target.get("ward_id"),
        zone_id=target.get("zone_id"),
        metadata={"user_name": name, "user_email": target.get("email"), "role": target.get("role")},
    )

    return ActionResult.success("User deleted", f"{name} has been deleted")
