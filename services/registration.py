# services/registration.py

from supabase import Client

from core.change_feed import notify_change
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.notices import ActionResult
from core.query_builder import fetch_by_id
from core.supabase_client import delete_auth_user
from core.utils import sanitize, utc_now_iso
from models.enums import AccountStatus, ActivityType, Role
from models.registration import RegistrationRequest
from services.audit import record_activity


PROFILE_FIELDS = [
    "phone", "address", "id_number", "id_type", "dob",
    "occupation", "qualification", "local_govt",
]


def register_member(client: Client, payload: RegistrationRequest) -> ActionResult:
    """
    Public self-registration. Creates the auth account and a users row
    with role=member, verified=false (pending approval).
    """
    data = sanitize(payload.model_dump())

    if not data.get("name"):
        return ActionResult.invalid("Please enter your full name")
    if not data.get("ward_id") or not data.get("zone_id"):
        return ActionResult.invalid("Please select your ward and zone")
    if not payload.password or len(payload.password) < 6:
        return ActionResult.invalid("Password must be at least 6 characters long")

    try:
        zone = fetch_by_id(client, "zones", data["zone_id"])
    except Exception as e:
        logger.error(f"Failed to load zone {data['zone_id']}: {extract_supabase_error(e)}")
        return ActionResult.failed("Registration failed. Please try again.")

    if zone is None or zone.get("ward_id") != data["ward_id"]:
        return ActionResult.invalid("The selected zone does not belong to the selected ward")

    email = str(payload.email).strip().lower()

    try:
        auth_resp = client.auth.sign_up({
            "email": email,
            "password": payload.password,
            "options": {"data": {"name": data["name"]}},
        })
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.warning(f"Sign-up failed for {email}: {detail}")
        if "registered" in detail.lower() or "exists" in detail.lower():
            return ActionResult.invalid("An account with this email already exists")
        return ActionResult.failed("Registration failed. Please try again.")

    if not auth_resp or not auth_resp.user:
        return ActionResult.failed("Registration failed. Please try again.")

    now = utc_now_iso()
    row = {
        "id": auth_resp.user.id,
        "email": email,
        "name": data["name"],
        "role": Role.member.value,
        "ward_id": data["ward_id"],
        "zone_id": data["zone_id"],
        "verified": False,
        "status": AccountStatus.active.value,
        "created_at": now,
        "updated_at": now,
    }
    row.update({k: data.get(k) for k in PROFILE_FIELDS})

    try:
        res = client.table("users").insert(row).execute()
    except Exception as e:
        logger.error(f"Failed to create registry profile for {email}: {extract_supabase_error(e)}")
        delete_auth_user(client, auth_resp.user.id)
        return ActionResult.failed("Registration failed. Please try again.")

    user = res.data[0] if res.data else row
    notify_change("users", "insert", user["id"])

    record_activity(
        client, user, ActivityType.user_registered,
        f"{user['name']} registered",
        target_user_id=user["id"],
        ward_id=user.get("ward_id"),
        zone_id=user.get("zone_id"),
        metadata={"user_email": email},
    )

    return ActionResult.success(
        "Registration successful",
        "Your registration has been submitted and is pending approval",
        data={"id": user["id"], "email": email},
    )
