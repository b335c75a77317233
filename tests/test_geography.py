# tests/test_geography.py

"""
Tests for ward / zone management and their referential rules.
"""

from services.geography import (
    create_ward,
    create_zone,
    delete_ward,
    delete_zone,
    update_zone,
    ward_statistics,
    zone_statistics,
)
from tests.conftest import USERS, WARDS, ZONES


def test_only_super_admin_creates_wards(fake_supabase, super_admin, ward_admin):
    assert create_ward(fake_supabase, ward_admin, {"name": "Ward Three"}).error_kind == "permission_denied"

    result = create_ward(fake_supabase, super_admin, {"name": "  Ward Three  "})
    assert result.ok is True
    assert result.data["name"] == "Ward Three"
    assert len(fake_supabase.rows("wards")) == 3


def test_create_ward_requires_name(fake_supabase, super_admin):
    assert create_ward(fake_supabase, super_admin, {"name": "   "}).error_kind == "validation"


def test_zone_needs_existing_ward(fake_supabase, super_admin):
    result = create_zone(fake_supabase, super_admin, {"name": "Zone X", "ward_id": "ward-missing"})
    assert result.error_kind == "validation"
    assert len(fake_supabase.rows("zones")) == 3


def test_ward_admin_creates_zone_in_own_ward_only(fake_supabase, ward_admin):
    assert create_zone(fake_supabase, ward_admin, {"name": "Zone D", "ward_id": "ward-1"}).ok
    result = create_zone(fake_supabase, ward_admin, {"name": "Zone E", "ward_id": "ward-2"})
    assert result.error_kind == "permission_denied"


def test_zonal_admin_cannot_edit_zones(fake_supabase, zonal_admin):
    result = update_zone(fake_supabase, zonal_admin, "zone-1", {"name": "Renamed"})
    assert result.error_kind == "permission_denied"


def test_moving_zone_moves_its_users(fake_supabase, super_admin):
    assert update_zone(fake_supabase, super_admin, "zone-1", {"ward_id": "ward-2"}).ok

    assert fake_supabase.row("zones", "zone-1")["ward_id"] == "ward-2"
    assert fake_supabase.row("users", "member-1")["ward_id"] == "ward-2"
    assert fake_supabase.row("users", "zonal-admin-1")["ward_id"] == "ward-2"


def test_delete_zone_unassigns_users(fake_supabase, ward_admin):
    result = delete_zone(fake_supabase, ward_admin, "zone-1")

    assert result.ok is True
    assert result.data == {"users_unassigned": 2}
    assert fake_supabase.row("zones", "zone-1") is None
    assert fake_supabase.row("users", "member-1")["zone_id"] is None
    assert fake_supabase.row("users", "member-1")["ward_id"] == "ward-1"


def test_delete_ward_cascades(fake_supabase, super_admin):
    result = delete_ward(fake_supabase, super_admin, "ward-1")

    assert result.ok is True
    assert result.data == {"zones_removed": 2, "users_unassigned": 4}
    assert [z["id"] for z in fake_supabase.rows("zones")] == ["zone-3"]
    assert fake_supabase.row("wards", "ward-1") is None

    member = fake_supabase.row("users", "member-2")
    assert member["ward_id"] is None
    assert member["zone_id"] is None

    [activity] = fake_supabase.rows("activities")
    assert activity["type"] == "ward_deleted"
    assert activity["metadata"]["zones_removed"] == 2


def test_ward_admin_cannot_delete_ward(fake_supabase, ward_admin):
    assert delete_ward(fake_supabase, ward_admin, "ward-1").error_kind == "permission_denied"
    assert fake_supabase.row("wards", "ward-1") is not None


def test_statistics():
    wards = {s.ward_id: s for s in ward_statistics(WARDS, ZONES, USERS)}
    assert wards["ward-1"].total_zones == 2
    assert wards["ward-1"].total_users == 4
    assert wards["ward-1"].pending_users == 1
    assert wards["ward-1"].approval_rate == 75

    zones = {s.zone_id: s for s in zone_statistics(ZONES, WARDS, USERS)}
    assert zones["zone-3"].ward_name == "Ward Two"
    assert zones["zone-3"].approval_rate == 0
