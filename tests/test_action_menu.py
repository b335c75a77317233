# tests/test_action_menu.py

"""
Every action offered in a record's menu must go through on the server.
"""

import pytest

from core.permission_helpers import can_perform_action, get_allowed_actions
from services.admin_actions import activate_admin, revoke_admin, suspend_admin
from services.user_actions import (
    approve_user,
    delete_user,
    reassign_user,
    reject_user,
    update_user,
)
from tests.conftest import USERS, WARDS, ZONES, FakeSupabaseClient


# Destination inside ward-1 / zone-1, which every admin fixture can see
SERVER_ACTIONS = {
    "approve": lambda c, a, uid: approve_user(c, a, uid),
    "reject": lambda c, a, uid: reject_user(c, a, uid, "Incomplete documents"),
    "reassign": lambda c, a, uid: reassign_user(c, a, uid, "zone-1", "ward-1"),
    "edit": lambda c, a, uid: update_user(c, a, uid, {"name": "Renamed"}),
    "delete": lambda c, a, uid: delete_user(c, a, uid),
    "suspend": lambda c, a, uid: suspend_admin(c, a, uid),
    "activate": lambda c, a, uid: activate_admin(c, a, uid),
    "revoke": lambda c, a, uid: revoke_admin(c, a, uid),
}

TARGETS = ["ward-admin-1", "zonal-admin-1", "member-1", "member-2"]


def fresh_registry():
    return FakeSupabaseClient({
        "wards": WARDS,
        "zones": ZONES,
        "users": USERS,
        "activities": [],
        "admin_appointments": [],
    })


def user(user_id):
    return next(u for u in USERS if u["id"] == user_id)


@pytest.mark.parametrize("actor_fixture", ["super_admin", "ward_admin", "zonal_admin"])
def test_menu_actions_succeed_on_the_server(actor_fixture, request):
    actor = request.getfixturevalue(actor_fixture)

    for target_id in TARGETS:
        for action in get_allowed_actions(actor, user(target_id)):
            if action == "view":
                continue
            result = SERVER_ACTIONS[action](fresh_registry(), actor, target_id)
            assert result.ok, (actor_fixture, target_id, action, result.error_kind)


def test_member_menu_has_no_admin_lifecycle_actions(super_admin):
    actions = get_allowed_actions(super_admin, user("member-2"))
    assert "suspend" not in actions
    assert "activate" not in actions
    assert "revoke" not in actions
    assert "approve" in actions


def test_admin_menu_has_no_approval_actions(super_admin):
    actions = get_allowed_actions(super_admin, user("zonal-admin-1"))
    assert "approve" not in actions
    assert "reject" not in actions
    assert "revoke" in actions


def test_zonal_admin_cannot_revoke_members(zonal_admin):
    assert can_perform_action(zonal_admin, user("member-1"), "revoke") is False
