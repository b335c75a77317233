# services/profile.py

"""
Self-service settings for the signed-in account: profile fields,
password change, profile picture, logout of every session.
"""

from typing import Any, Optional

from supabase import Client

from core.change_feed import notify_change
from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.notices import ActionResult
from core.utils import field_of, sanitize, utc_now, utc_now_iso
from models.enums import ActivityType
from services.audit import record_activity, changed_fields


PROFILE_FIELDS = ["name", "phone", "address"]
MIN_PASSWORD_LENGTH = 6


def _scope(actor: Any) -> dict:
    return {"ward_id": field_of(actor, "ward_id"), "zone_id": field_of(actor, "zone_id")}


# ============================================================
# PROFILE
# ============================================================
def update_profile(client: Client, actor: Any, payload: dict) -> ActionResult:
    changes = {k: v for k, v in sanitize(payload).items() if k in PROFILE_FIELDS and v is not None}
    if not changes:
        return ActionResult.invalid("No fields provided to update")

    actor_id = field_of(actor, "id")
    before = {k: field_of(actor, k) for k in changes}
    changes["updated_at"] = utc_now_iso()

    try:
        res = client.table("users").update(changes).eq("id", actor_id).execute()
    except Exception as e:
        logger.error(f"Failed to update profile for {actor_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to update profile. Please try again.")

    notify_change("users", "update", actor_id)
    record_activity(
        client, actor, ActivityType.profile_updated,
        "Updated profile information",
        target_user_id=actor_id,
        metadata={"changes": changed_fields(before, {k: v for k, v in changes.items() if k != "updated_at"})},
        **_scope(actor),
    )

    updated = res.data[0] if res.data else changes
    return ActionResult.success("Profile updated", "Your profile has been updated successfully", data=updated)


# ============================================================
# PASSWORD
# ============================================================
def change_password(
    client: Client,
    actor: Any,
    current_password: Optional[str],
    new_password: Optional[str],
    confirm_password: Optional[str],
) -> ActionResult:
    if not current_password or not new_password:
        return ActionResult.invalid("Please fill in all password fields")
    if new_password != confirm_password:
        return ActionResult.invalid("New passwords do not match")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return ActionResult.invalid(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    actor_id = field_of(actor, "id")

    # Re-verify the current credentials before touching the password
    try:
        resp = client.auth.sign_in_with_password({
            "email": field_of(actor, "email"),
            "password": current_password,
        })
    except Exception as e:
        logger.warning(f"Password re-verification failed for {actor_id}: {type(e).__name__}")
        return ActionResult.invalid("Current password is incorrect")

    if not resp or not resp.user or resp.user.id != actor_id:
        return ActionResult.invalid("Current password is incorrect")

    try:
        client.auth.admin.update_user_by_id(actor_id, {"password": new_password})
    except Exception as e:
        logger.error(f"Failed to change password for {actor_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to change password. Please try again.")

    record_activity(
        client, actor, ActivityType.password_changed,
        "Changed account password",
        target_user_id=actor_id,
        **_scope(actor),
    )
    return ActionResult.success("Password changed", "Your password has been changed successfully")


# ============================================================
# PROFILE PICTURE (Supabase Storage)
# ============================================================
def upload_profile_picture(
    client: Client,
    actor: Any,
    filename: str,
    content_type: Optional[str],
    content: bytes,
) -> ActionResult:
    if not content_type or not content_type.startswith("image/"):
        return ActionResult.invalid("Please select an image file")

    max_bytes = settings.PROFILE_PICTURE_MAX_BYTES
    if len(content) > max_bytes:
        return ActionResult.invalid(f"Image size must be less than {max_bytes // (1024 * 1024)}MB")

    actor_id = field_of(actor, "id")
    timestamp = int(utc_now().timestamp() * 1000)
    path = f"profile-pictures/{actor_id}/{timestamp}_{filename}"

    try:
        bucket = client.storage.from_(settings.PROFILE_PICTURE_BUCKET)
        bucket.upload(path, content, {"content-type": content_type})
        url = bucket.get_public_url(path)

        client.table("users").update({
            "profile_picture": url,
            "updated_at": utc_now_iso(),
        }).eq("id", actor_id).execute()
    except Exception as e:
        logger.error(f"Failed to upload profile picture for {actor_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to upload profile picture. Please try again.")

    notify_change("users", "update", actor_id)
    record_activity(
        client, actor, ActivityType.profile_picture_updated,
        "Updated profile picture",
        target_user_id=actor_id,
        metadata={"path": path},
        **_scope(actor),
    )
    return ActionResult.success("Profile picture updated", "Your profile picture has been updated", data={"url": url})


# ============================================================
# LOGOUT ALL SESSIONS
# ============================================================
def logout_all_sessions(client: Client, actor: Any, access_token: str) -> ActionResult:
    actor_id = field_of(actor, "id")

    # Record first: the token is invalid afterwards
    record_activity(
        client, actor, ActivityType.logout_all_sessions,
        "Logged out from all sessions",
        target_user_id=actor_id,
        **_scope(actor),
    )

    try:
        client.auth.admin.sign_out(access_token, "global")
    except Exception as e:
        logger.error(f"Failed to sign out sessions for {actor_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to log out all sessions. Please try again.")

    return ActionResult.success("Logged out", "You have been logged out from all sessions")
