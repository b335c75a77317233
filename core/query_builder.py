# core/query_builder.py

"""
Role-scoped query builder.

Every read of users / zones / wards / activities / appointments starts from
one of the build_* functions below. Scoping is fail-closed: when the actor's
role does not yield a scoping key (unknown role, zonalAdmin without zone_id,
...) the builder returns an EMPTY query, and execute_query returns [] without
touching Supabase. Secondary filters never reopen an empty query.
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Tuple

from supabase import Client

from core.utils import field_of
from models.enums import Role, ADMIN_ROLES


@dataclass(frozen=True)
class ScopedQuery:
    collection: str
    eq_filters: Tuple[Tuple[str, Any], ...] = ()
    in_filters: Tuple[Tuple[str, Tuple[Any, ...]], ...] = ()
    order_by: Optional[str] = "created_at"
    descending: bool = True
    limit: Optional[int] = None
    empty: bool = False

    def where(self, column: str, value: Any) -> "ScopedQuery":
        if self.empty:
            return self
        if value is None:
            # Equality with a missing key can match nothing.
            return replace(self, empty=True)
        return replace(self, eq_filters=self.eq_filters + ((column, value),))

    def where_in(self, column: str, values: List[Any]) -> "ScopedQuery":
        if self.empty:
            return self
        values = tuple(v for v in values if v is not None)
        if not values:
            return replace(self, empty=True)
        return replace(self, in_filters=self.in_filters + ((column, values),))

    def take(self, limit: int) -> "ScopedQuery":
        return replace(self, limit=limit)

    def matches(self, record: Any) -> bool:
        """Client-side evaluation of the same filters (live-feed checks, tests)."""
        if self.empty:
            return False
        for column, value in self.eq_filters:
            if field_of(record, column) != value:
                return False
        for column, values in self.in_filters:
            if field_of(record, column) not in values:
                return False
        return True


def empty_query(collection: str) -> ScopedQuery:
    return ScopedQuery(collection=collection, empty=True)


def unscoped_query(collection: str) -> ScopedQuery:
    return ScopedQuery(collection=collection)


# ============================================================
# USERS
# ============================================================
def build_users_query(actor: Any) -> ScopedQuery:
    role = field_of(actor, "role")
    base = unscoped_query("users")

    if role == Role.super_admin.value:
        return base
    if role == Role.ward_admin.value:
        return base.where("ward_id", field_of(actor, "ward_id"))
    if role == Role.zonal_admin.value:
        return base.where("zone_id", field_of(actor, "zone_id"))

    return empty_query("users")


def build_approvals_query(actor: Any) -> ScopedQuery:
    """Registrants awaiting (or past) a decision: members only."""
    return build_users_query(actor).where("role", Role.member.value)


def build_candidates_query(actor: Any) -> ScopedQuery:
    """Members eligible for appointment: verified members in scope."""
    return (
        build_users_query(actor)
        .where("role", Role.member.value)
        .where("verified", True)
    )


def build_admins_query(actor: Any) -> ScopedQuery:
    return build_users_query(actor).where_in("role", ADMIN_ROLES)


# ============================================================
# ZONES
# ============================================================
def build_zones_query(actor: Any) -> ScopedQuery:
    role = field_of(actor, "role")
    base = unscoped_query("zones")

    if role == Role.super_admin.value:
        return base
    if role == Role.ward_admin.value:
        return base.where("ward_id", field_of(actor, "ward_id"))
    if role == Role.zonal_admin.value:
        return base.where("id", field_of(actor, "zone_id"))

    return empty_query("zones")


# ============================================================
# WARDS
# ============================================================
def build_wards_query(actor: Any, actor_zone: Any = None) -> ScopedQuery:
    """
    zonalAdmin scoping needs the actor's zone row (its owning ward);
    see load_actor_zone().
    """
    role = field_of(actor, "role")
    base = unscoped_query("wards")

    if role == Role.super_admin.value:
        return base
    if role == Role.ward_admin.value:
        return base.where("id", field_of(actor, "ward_id"))
    if role == Role.zonal_admin.value:
        zone_id = field_of(actor, "zone_id")
        if zone_id is None or field_of(actor_zone, "id") != zone_id:
            return empty_query("wards")
        return base.where("id", field_of(actor_zone, "ward_id"))

    return empty_query("wards")


# ============================================================
# ACTIVITIES (audit log)
# ============================================================
def build_activities_query(actor: Any) -> ScopedQuery:
    role = field_of(actor, "role")
    base = unscoped_query("activities")

    if role == Role.super_admin.value:
        return base
    if role == Role.ward_admin.value:
        return base.where("ward_id", field_of(actor, "ward_id"))
    if role == Role.zonal_admin.value:
        return base.where("zone_id", field_of(actor, "zone_id"))

    return empty_query("activities")


# ============================================================
# ADMIN APPOINTMENTS
# ============================================================
def build_appointments_query(actor: Any) -> ScopedQuery:
    role = field_of(actor, "role")
    base = unscoped_query("admin_appointments")

    if role == Role.super_admin.value:
        return base
    if role == Role.ward_admin.value:
        return base.where("ward_id", field_of(actor, "ward_id"))

    return empty_query("admin_appointments")


# ============================================================
# EXECUTION (Supabase)
# ============================================================
def execute_query(client: Client, query: ScopedQuery) -> List[dict]:
    """
    Run a scoped query. Empty queries short-circuit to [].
    Supabase errors propagate to the caller.
    """
    if query.empty:
        return []

    q = client.table(query.collection).select("*")

    for column, value in query.eq_filters:
        q = q.eq(column, value)
    for column, values in query.in_filters:
        q = q.in_(column, list(values))

    if query.order_by:
        q = q.order(query.order_by, desc=query.descending)
    if query.limit is not None:
        q = q.limit(query.limit)

    res = q.execute()
    return res.data or []


def load_actor_zone(client: Client, actor: Any) -> Optional[dict]:
    zone_id = field_of(actor, "zone_id")
    if zone_id is None:
        return None

    res = client.table("zones").select("*").eq("id", zone_id).limit(1).execute()
    return res.data[0] if res.data else None


def fetch_wards(client: Client, actor: Any) -> List[dict]:
    """Scoped wards, resolving a zonalAdmin's owning ward first."""
    actor_zone = None
    if field_of(actor, "role") == Role.zonal_admin.value:
        actor_zone = load_actor_zone(client, actor)
    return execute_query(client, build_wards_query(actor, actor_zone))


def fetch_by_id(client: Client, collection: str, record_id: str) -> Optional[dict]:
    res = client.table(collection).select("*").eq("id", record_id).limit(1).execute()
    return res.data[0] if res.data else None


def fetch_all(client: Client, collection: str) -> List[dict]:
    return execute_query(client, unscoped_query(collection))
