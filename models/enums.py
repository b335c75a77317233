from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """Fixed role set. Order of the hierarchy: superAdmin > wardAdmin > zonalAdmin."""

    super_admin = "superAdmin"
    ward_admin = "wardAdmin"
    zonal_admin = "zonalAdmin"
    member = "member"


ADMIN_ROLES = [Role.super_admin.value, Role.ward_admin.value, Role.zonal_admin.value]

# Roles that can be granted through an appointment
APPOINTABLE_ROLES = [Role.ward_admin.value, Role.zonal_admin.value]

ROLE_LABELS = {
    Role.ward_admin.value: "Ward Admin",
    Role.zonal_admin.value: "Zonal Admin",
    Role.super_admin.value: "Super Admin",
}


# -----------------------------------------------------
# ACCOUNT STATUS
# -----------------------------------------------------
class AccountStatus(BaseStrEnum):
    """Governs login eligibility."""

    active = "active"
    inactive = "inactive"
    suspended = "suspended"


# -----------------------------------------------------
# RECORD ACTIONS (permission predicate vocabulary)
# -----------------------------------------------------
class Action(BaseStrEnum):
    view = "view"
    edit = "edit"
    approve = "approve"
    reject = "reject"
    suspend = "suspend"
    activate = "activate"
    revoke = "revoke"
    reassign = "reassign"
    delete = "delete"


# Actions an actor can never take on its own record
SELF_FORBIDDEN_ACTIONS = {
    Action.suspend.value,
    Action.revoke.value,
    Action.approve.value,
    Action.reject.value,
}

# Actions that only make sense for one kind of record
MEMBER_ONLY_ACTIONS = {
    Action.approve.value,
    Action.reject.value,
}

ADMIN_ONLY_ACTIONS = {
    Action.suspend.value,
    Action.activate.value,
    Action.revoke.value,
}


# -----------------------------------------------------
# GEOGRAPHY ACTIONS
# -----------------------------------------------------
class GeoAction(BaseStrEnum):
    view = "view"
    create = "create"
    edit = "edit"
    delete = "delete"


# -----------------------------------------------------
# REGISTRATION STATUS (derived, never stored)
# -----------------------------------------------------
class ApprovalStatus(BaseStrEnum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# -----------------------------------------------------
# APPOINTMENT STATUS
# -----------------------------------------------------
class AppointmentStatus(BaseStrEnum):
    pending = "pending"
    sent = "sent"
    accepted = "accepted"
    expired = "expired"


OPEN_APPOINTMENT_STATUSES = [AppointmentStatus.pending.value, AppointmentStatus.sent.value]


# -----------------------------------------------------
# ACTIVITY TYPE (audit log)
# -----------------------------------------------------
class ActivityType(BaseStrEnum):
    user_registered = "user_registered"
    user_approved = "user_approved"
    user_rejected = "user_rejected"
    user_reassigned = "user_reassigned"
    user_updated = "user_updated"
    user_deleted = "user_deleted"

    admin_appointed = "admin_appointed"
    admin_updated = "admin_updated"
    admin_suspended = "admin_suspended"
    admin_activated = "admin_activated"
    admin_revoked = "admin_revoked"

    appointment_created = "admin_appointment_created"
    appointment_accepted = "admin_appointment_accepted"
    appointment_cancelled = "admin_appointment_cancelled"

    ward_created = "ward_created"
    ward_updated = "ward_updated"
    ward_deleted = "ward_deleted"
    zone_created = "zone_created"
    zone_updated = "zone_updated"
    zone_deleted = "zone_deleted"

    profile_updated = "profile_updated"
    password_changed = "password_changed"
    profile_picture_updated = "profile_picture_updated"
    logout_all_sessions = "logout_all_sessions"


# -----------------------------------------------------
# REPORT EXPORTS
# -----------------------------------------------------
class ReportType(BaseStrEnum):
    all_users = "all-users"
    verified_users = "verified-users"
    pending_users = "pending-users"
    admin_users = "admin-users"
    zone_performance = "zone-performance"
    ward_performance = "ward-performance"
