# tests/test_permissions.py

"""
Tests for permission checks and access control.
"""

import pytest

from core.permission_helpers import (
    can_appoint,
    can_appoint_role,
    can_manage_ward,
    can_manage_zone,
    can_perform_action,
    get_allowed_actions,
    has_permission,
    visible_navigation,
)
from models.enums import Action
from tests.conftest import USERS, ZONES


def user(user_id):
    return next(u for u in USERS if u["id"] == user_id)


ALL_ACTIONS = Action.list()


# ============================================================
# Record-level predicate
# ============================================================
@pytest.mark.parametrize("action", ["suspend", "revoke", "approve", "reject"])
def test_nobody_can_self_moderate(action, super_admin, ward_admin, zonal_admin):
    for actor in (super_admin, ward_admin, zonal_admin):
        assert can_perform_action(actor, actor, action) is False


def test_super_admin_menu_follows_target_role(super_admin):
    for target_id in ("member-1", "member-3"):
        assert get_allowed_actions(super_admin, user(target_id)) == [
            "view", "edit", "approve", "reject", "reassign", "delete",
        ]
    for target_id in ("ward-admin-1", "zonal-admin-1"):
        assert get_allowed_actions(super_admin, user(target_id)) == [
            "view", "edit", "suspend", "activate", "revoke", "reassign", "delete",
        ]


def test_super_admin_cannot_touch_another_super_admin(super_admin):
    other = {"id": "super-2", "role": "superAdmin"}
    for action in ALL_ACTIONS:
        assert can_perform_action(super_admin, other, action) is False


def test_ward_admin_limited_to_own_ward(ward_admin):
    assert can_perform_action(ward_admin, user("member-1"), "approve") is True
    assert can_perform_action(ward_admin, user("zonal-admin-1"), "suspend") is True
    assert can_perform_action(ward_admin, user("member-3"), "view") is False
    assert can_perform_action(ward_admin, user("super-1"), "view") is False


def test_ward_admin_cannot_act_on_peer_ward_admin(ward_admin):
    peer = {"id": "ward-admin-2", "role": "wardAdmin", "ward_id": "ward-1"}
    assert can_perform_action(ward_admin, peer, "view") is False


def test_ward_admin_self_is_view_and_edit_only(ward_admin):
    assert get_allowed_actions(ward_admin, ward_admin) == ["view", "edit"]


def test_zonal_admin_limited_to_members_of_own_zone(zonal_admin):
    assert can_perform_action(zonal_admin, user("member-1"), "approve") is True
    assert can_perform_action(zonal_admin, user("member-2"), "approve") is False
    assert can_perform_action(zonal_admin, user("ward-admin-1"), "view") is False
    assert get_allowed_actions(zonal_admin, zonal_admin) == ["view"]


def test_zonal_admin_without_zone_is_denied():
    actor = {"id": "z", "role": "zonalAdmin", "zone_id": None}
    target = {"id": "m", "role": "member", "zone_id": None}
    assert can_perform_action(actor, target, "view") is False


def test_member_and_unknown_roles_are_denied(member_user):
    assert get_allowed_actions(member_user, user("member-1")) == []
    assert can_perform_action({"id": "x", "role": "owner"}, user("member-1"), "view") is False


def test_unknown_action_and_missing_records_are_denied(super_admin):
    assert can_perform_action(super_admin, user("member-1"), "promote") is False
    assert can_perform_action(None, user("member-1"), "view") is False
    assert can_perform_action(super_admin, None, "view") is False


# ============================================================
# Appointments
# ============================================================
def test_ward_admin_appoints_zonal_admins_in_own_ward_only(ward_admin):
    assert can_appoint_role(ward_admin, "zonalAdmin", "zone-2", "ward-1", ZONES) is True
    assert can_appoint_role(ward_admin, "zonalAdmin", "zone-3", "ward-2", ZONES) is False
    assert can_appoint_role(ward_admin, "wardAdmin", None, "ward-1", ZONES) is False


def test_zonal_admin_cannot_appoint(zonal_admin):
    assert can_appoint_role(zonal_admin, "zonalAdmin", "zone-1", "ward-1", ZONES) is False


def test_only_verified_members_can_be_appointed(super_admin):
    assert can_appoint(super_admin, user("member-2"), "zonalAdmin", "zone-2", "ward-1", ZONES) is True
    assert can_appoint(super_admin, user("member-1"), "zonalAdmin", "zone-1", "ward-1", ZONES) is False
    assert can_appoint(super_admin, user("zonal-admin-1"), "wardAdmin", None, "ward-1", ZONES) is False


def test_ward_admin_cannot_appoint_member_from_other_ward(ward_admin):
    verified_elsewhere = {**user("member-3"), "verified": True}
    assert can_appoint(ward_admin, verified_elsewhere, "zonalAdmin", "zone-1", "ward-1", ZONES) is False


# ============================================================
# Geography
# ============================================================
def test_ward_management(super_admin, ward_admin, zonal_admin):
    ward_1 = {"id": "ward-1"}
    ward_2 = {"id": "ward-2"}

    assert can_manage_ward(super_admin, None, "create", []) is True
    assert can_manage_ward(ward_admin, None, "create", []) is False
    assert can_manage_ward(ward_admin, ward_1, "edit", ZONES) is True
    assert can_manage_ward(ward_admin, ward_2, "edit", ZONES) is False
    assert can_manage_ward(ward_admin, ward_1, "delete", ZONES) is False
    assert can_manage_ward(zonal_admin, ward_1, "view", ZONES) is True
    assert can_manage_ward(zonal_admin, ward_1, "edit", ZONES) is False


def test_zone_management(ward_admin, zonal_admin):
    assert can_manage_zone(ward_admin, {"ward_id": "ward-1"}, "create") is True
    assert can_manage_zone(ward_admin, {"ward_id": "ward-2"}, "create") is False
    assert can_manage_zone(zonal_admin, ZONES[0], "view") is True
    assert can_manage_zone(zonal_admin, ZONES[0], "edit") is False
    assert can_manage_zone(zonal_admin, ZONES[1], "view") is False


# ============================================================
# Page-level permissions
# ============================================================
def test_page_permissions(super_admin, ward_admin, zonal_admin, member_user):
    assert has_permission(super_admin, "anything:at-all") is True
    assert has_permission(ward_admin, "admins:write") is True
    assert has_permission(zonal_admin, "users:read") is True
    assert has_permission(zonal_admin, "admins:write") is False
    assert has_permission(member_user, "dashboard:read") is False


def test_navigation_follows_permissions(ward_admin, member_user):
    ward_admin_items = [i["name"] for i in visible_navigation(ward_admin)]
    assert "Dashboard" in ward_admin_items
    assert [i["name"] for i in visible_navigation(member_user)] == ["Settings"]
