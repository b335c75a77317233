from fastapi import Depends, HTTPException
from typing import Any, List, Optional
from dependencies.auth import get_current_user, CurrentUser
from core.permissions import ROLE_PERMISSIONS, NAVIGATION
from core.hierarchy import (
    get_accessible_wards,
    get_accessible_zones,
    zone_belongs_to_ward,
)
from core.utils import field_of
from models.enums import (
    Action,
    GeoAction,
    Role,
    APPOINTABLE_ROLES,
    SELF_FORBIDDEN_ACTIONS,
    MEMBER_ONLY_ACTIONS,
    ADMIN_ONLY_ACTIONS,
)


# -----------------------------------------------------
# Collect effective page-level permissions for a role
# -----------------------------------------------------
def get_effective_permissions(user: CurrentUser) -> set:
    return set(ROLE_PERMISSIONS.get(user.role, []))


# -----------------------------------------------------
# Permission evaluation
# -----------------------------------------------------
def has_permission(user: CurrentUser, permission: str) -> bool:
    effective = get_effective_permissions(user)

    # Wildcard grants everything
    if "*" in effective:
        return True

    return permission in effective


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_permission(permission: str):
    """
    Usage:
        @router.get("", dependencies=[Depends(requires_permission("users:read"))])
    """

    def dependency(current_user: CurrentUser = Depends(get_current_user)):
        if not has_permission(current_user, permission):
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions: '{permission}' required"
            )
        return current_user

    return dependency


def is_super_admin(user: Any) -> bool:
    return field_of(user, "role") == Role.super_admin.value


def visible_navigation(user: CurrentUser) -> List[dict]:
    """Sidebar entries for the actor's role."""
    return [
        item for item in NAVIGATION
        if item["permission"] is None or has_permission(user, item["permission"])
    ]


# ============================================================
# RECORD-LEVEL PREDICATE (users and admins)
# ============================================================
# One table for every mutation path and every action menu:
#
#   self            never suspend / revoke / approve / reject
#   target role     approve / reject only on members;
#                   suspend / activate / revoke only on ward and zonal admins
#   superAdmin      everything, except another superAdmin's record
#   wardAdmin       same ward_id, target is zonalAdmin or member;
#                   own record: view + edit
#   zonalAdmin      same zone_id, target is member; own record: view
#   anything else   deny
# ============================================================
def can_perform_action(actor: Any, target: Any, action: str) -> bool:
    if actor is None or target is None:
        return False

    if action not in Action.list():
        return False

    actor_id = field_of(actor, "id")
    target_id = field_of(target, "id")
    is_self = actor_id is not None and actor_id == target_id

    if is_self and action in SELF_FORBIDDEN_ACTIONS:
        return False

    role = field_of(actor, "role")
    target_role = field_of(target, "role")

    if action in MEMBER_ONLY_ACTIONS and target_role != Role.member.value:
        return False
    if action in ADMIN_ONLY_ACTIONS and target_role not in APPOINTABLE_ROLES:
        return False

    if role == Role.super_admin.value:
        if target_role == Role.super_admin.value and not is_self:
            return False
        return True

    if role == Role.ward_admin.value:
        if is_self:
            return action in (Action.view.value, Action.edit.value)

        ward_id = field_of(actor, "ward_id")
        if ward_id is None or field_of(target, "ward_id") != ward_id:
            return False
        return target_role in (Role.zonal_admin.value, Role.member.value)

    if role == Role.zonal_admin.value:
        if is_self:
            return action == Action.view.value

        zone_id = field_of(actor, "zone_id")
        if zone_id is None or field_of(target, "zone_id") != zone_id:
            return False
        return target_role == Role.member.value

    return False


def get_allowed_actions(actor: Any, target: Any) -> List[str]:
    """Action menu for a record, derived from the same predicate."""
    return [a for a in Action.list() if can_perform_action(actor, target, a)]


# ============================================================
# APPOINTMENTS
# ============================================================
def can_appoint_role(
    actor: Any,
    role: str,
    zone_id: Optional[str],
    ward_id: Optional[str],
    zones: List[Any],
) -> bool:
    """
    Whether the actor may grant `role` scoped to zone_id / ward_id.
    superAdmin: either admin role anywhere.
    wardAdmin: zonalAdmin only, for a zone under its own ward.
    """
    if role not in APPOINTABLE_ROLES:
        return False

    actor_role = field_of(actor, "role")

    if actor_role == Role.super_admin.value:
        return True

    if actor_role == Role.ward_admin.value:
        own_ward = field_of(actor, "ward_id")
        if role != Role.zonal_admin.value or own_ward is None:
            return False
        if ward_id is not None and ward_id != own_ward:
            return False
        return zone_belongs_to_ward(zone_id, own_ward, zones)

    return False


def can_appoint(
    actor: Any,
    target: Any,
    role: str,
    zone_id: Optional[str],
    ward_id: Optional[str],
    zones: List[Any],
) -> bool:
    """Appointment of an existing account: target must be a verified member."""
    if actor is None or target is None:
        return False

    if field_of(actor, "id") == field_of(target, "id"):
        return False

    if field_of(target, "role") != Role.member.value or field_of(target, "verified") is not True:
        return False

    if field_of(actor, "role") == Role.ward_admin.value:
        if field_of(target, "ward_id") != field_of(actor, "ward_id"):
            return False

    return can_appoint_role(actor, role, zone_id, ward_id, zones)


# ============================================================
# WARDS AND ZONES
# ============================================================
def can_manage_ward(actor: Any, ward: Any, action: str, zones: List[Any]) -> bool:
    role = field_of(actor, "role")

    if action == GeoAction.view.value:
        if ward is None:
            return False
        visible = get_accessible_wards(actor, [ward], zones)
        return len(visible) == 1

    if action in (GeoAction.create.value, GeoAction.delete.value):
        return role == Role.super_admin.value

    if action == GeoAction.edit.value:
        if role == Role.super_admin.value:
            return True
        own_ward = field_of(actor, "ward_id")
        return (
            role == Role.ward_admin.value
            and own_ward is not None
            and field_of(ward, "id") == own_ward
        )

    return False


def can_manage_zone(actor: Any, zone: Any, action: str) -> bool:
    """
    `zone` may be a draft (create) carrying only ward_id.
    wardAdmins manage zones under their own ward; zonalAdmins only view.
    """
    if zone is None:
        return False

    role = field_of(actor, "role")

    if action == GeoAction.view.value:
        return len(get_accessible_zones(actor, [zone])) == 1

    if action in (GeoAction.create.value, GeoAction.edit.value, GeoAction.delete.value):
        if role == Role.super_admin.value:
            return True
        own_ward = field_of(actor, "ward_id")
        return (
            role == Role.ward_admin.value
            and own_ward is not None
            and field_of(zone, "ward_id") == own_ward
        )

    return False
