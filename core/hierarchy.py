# core/hierarchy.py

"""
Geographic hierarchy resolver.

Given the actor context and already-loaded wards/zones, compute the slice
of the ward → zone graph the actor may see. Pure functions: no I/O, never
raise, missing matches yield empty lists.
"""

from typing import Any, List, Optional

from core.utils import field_of
from models.enums import Role


def _find(records: List[Any], record_id: Optional[str]) -> Optional[Any]:
    if record_id is None:
        return None
    for record in records or []:
        if field_of(record, "id") == record_id:
            return record
    return None


def resolve_actor_ward_id(actor: Any, zones: List[Any]) -> Optional[str]:
    """
    Ward an actor is scoped to.
    wardAdmin: its ward_id. zonalAdmin: the ward owning its zone.
    """
    role = field_of(actor, "role")

    if role == Role.ward_admin.value:
        return field_of(actor, "ward_id")

    if role == Role.zonal_admin.value:
        zone = _find(zones, field_of(actor, "zone_id"))
        return field_of(zone, "ward_id")

    return None


# ============================================================
# ACCESSIBLE WARDS
# ============================================================
def get_accessible_wards(actor: Any, wards: List[Any], zones: List[Any]) -> List[Any]:
    role = field_of(actor, "role")

    if role == Role.super_admin.value:
        return list(wards or [])

    if role in (Role.ward_admin.value, Role.zonal_admin.value):
        ward = _find(wards, resolve_actor_ward_id(actor, zones))
        return [ward] if ward is not None else []

    return []


# ============================================================
# ACCESSIBLE ZONES
# ============================================================
def get_accessible_zones(actor: Any, zones: List[Any]) -> List[Any]:
    role = field_of(actor, "role")

    if role == Role.super_admin.value:
        return list(zones or [])

    if role == Role.ward_admin.value:
        ward_id = field_of(actor, "ward_id")
        if ward_id is None:
            return []
        return [z for z in zones or [] if field_of(z, "ward_id") == ward_id]

    if role == Role.zonal_admin.value:
        zone = _find(zones, field_of(actor, "zone_id"))
        return [zone] if zone is not None else []

    return []


def zone_belongs_to_ward(zone_id: Optional[str], ward_id: Optional[str], zones: List[Any]) -> bool:
    zone = _find(zones, zone_id)
    if zone is None or ward_id is None:
        return False
    return field_of(zone, "ward_id") == ward_id


def find_by_id(records: List[Any], record_id: Optional[str]) -> Optional[Any]:
    return _find(records, record_id)
