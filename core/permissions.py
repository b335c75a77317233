# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
# Page-level gates only. Record-level decisions (which user, ward or zone)
# go through core.permission_helpers.

ADMIN_READ_PERMISSIONS = [
    "dashboard:read",
    "activities:read",
    "users:read",
    "approvals:read",
    "zones:read",
    "wards:read",
    "reports:read",
    "admins:read",
]

ROLE_PERMISSIONS = {

    # =====================================================
    # SUPER ADMIN: Full access to everything
    # =====================================================
    "superAdmin": [
        "*",
    ],

    # =====================================================
    # WARD ADMIN, one ward, may appoint zonal admins
    # =====================================================
    "wardAdmin": ADMIN_READ_PERMISSIONS + [
        "admins:write",
    ],

    # =====================================================
    # ZONAL ADMIN, one zone, read + member actions
    # =====================================================
    "zonalAdmin": list(ADMIN_READ_PERMISSIONS),

    # =====================================================
    # MEMBER, own profile only
    # =====================================================
    "member": [],
}


# ============================================
# DASHBOARD NAVIGATION (sidebar)
# ============================================
NAVIGATION = [
    {"name": "Dashboard", "href": "/dashboard", "permission": "dashboard:read"},
    {"name": "Users", "href": "/dashboard/users", "permission": "users:read"},
    {"name": "Zones", "href": "/dashboard/zones", "permission": "zones:read"},
    {"name": "Wards", "href": "/dashboard/wards", "permission": "wards:read"},
    {"name": "Pending Approvals", "href": "/dashboard/approvals", "permission": "approvals:read"},
    {"name": "Reports", "href": "/dashboard/reports", "permission": "reports:read"},
    {"name": "Admin Management", "href": "/dashboard/admins", "permission": "admins:read"},
    {"name": "Settings", "href": "/dashboard/settings", "permission": None},
]
