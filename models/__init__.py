# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    AccountStatus,
    Action,
    GeoAction,
    ApprovalStatus,
    AppointmentStatus,
    ActivityType,
    ReportType,
)

# -------------------------
# User Models
# -------------------------
from .user import (
    UserRecord,
    UserWithActions,
    UserUpdate,
    RejectRequest,
    ReassignRequest,
    ProfileUpdate,
    PasswordChange,
    approval_status,
)

# -------------------------
# Geography Models
# -------------------------
from .ward import WardCreate, WardRead, WardUpdate, WardStats
from .zone import ZoneCreate, ZoneRead, ZoneUpdate, ZoneStats

# -------------------------
# Admin / Appointment Models
# -------------------------
from .appointment import (
    AppointAdminRequest,
    AdminUpdate,
    AppointmentCreate,
    AppointmentAccept,
    AppointmentRead,
    AdminStats,
)

# -------------------------
# Activity / Dashboard
# -------------------------
from .activity import ActivityRead
from .dashboard import DashboardStats, DashboardSnapshot

# -------------------------
# Auth / Registration
# -------------------------
from .auth import LoginRequest, TokenResponse
from .registration import RegistrationRequest

__all__ = [
    # enums
    "Role",
    "AccountStatus",
    "Action",
    "GeoAction",
    "ApprovalStatus",
    "AppointmentStatus",
    "ActivityType",
    "ReportType",

    # users
    "UserRecord",
    "UserWithActions",
    "UserUpdate",
    "RejectRequest",
    "ReassignRequest",
    "ProfileUpdate",
    "PasswordChange",
    "approval_status",

    # geography
    "WardCreate",
    "WardRead",
    "WardUpdate",
    "WardStats",
    "ZoneCreate",
    "ZoneRead",
    "ZoneUpdate",
    "ZoneStats",

    # admins
    "AppointAdminRequest",
    "AdminUpdate",
    "AppointmentCreate",
    "AppointmentAccept",
    "AppointmentRead",
    "AdminStats",

    # activity / dashboard
    "ActivityRead",
    "DashboardStats",
    "DashboardSnapshot",

    # auth / registration
    "LoginRequest",
    "TokenResponse",
    "RegistrationRequest",
]
