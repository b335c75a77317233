# services/appointments.py

"""
Email invitations for people who do not have an account yet.

pending --email sent--> sent --accept--> accepted
pending|sent --expires_at passed--> expired
Cancelling deletes the invitation.
"""

from datetime import timedelta
from typing import Any, List, Optional

from supabase import Client

from core.change_feed import notify_change
from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.notices import ActionResult
from core.notifications import send_appointment_invite
from core.permission_helpers import can_appoint_role, is_super_admin
from core.query_builder import (
    build_appointments_query,
    execute_query,
    fetch_all,
    fetch_by_id,
)
from core.supabase_client import delete_auth_user
from core.utils import field_of, parse_timestamp, utc_now, utc_now_iso
from models.appointment import AppointmentRead
from models.enums import (
    ActivityType,
    AccountStatus,
    AppointmentStatus,
    OPEN_APPOINTMENT_STATUSES,
    ROLE_LABELS,
)
from services.admin_actions import resolve_appointment_scope
from services.audit import record_activity


TABLE = "admin_appointments"


def list_appointments(client: Client, actor: Any) -> List[AppointmentRead]:
    return [AppointmentRead.model_validate(row) for row in execute_query(client, build_appointments_query(actor))]


# ============================================================
# CREATE
# ============================================================
def create_appointment(
    client: Client,
    actor: Any,
    appointee_email: Optional[str],
    appointee_name: Optional[str],
    role: Optional[str],
    zone_id: Optional[str] = None,
    ward_id: Optional[str] = None,
) -> ActionResult:
    email = (appointee_email or "").strip().lower()
    name = (appointee_name or "").strip()
    if not email or not name or not role:
        return ActionResult.invalid("Please provide the appointee's name, email and role")

    try:
        zones = fetch_all(client, "zones")
        wards = fetch_all(client, "wards")
    except Exception as e:
        logger.error(f"Failed to load geography for appointment: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to create appointment. Please try again.")

    zone_id, ward_id, error = resolve_appointment_scope(role, zone_id, ward_id, zones, wards)
    if error:
        return error

    if not can_appoint_role(actor, role, zone_id, ward_id, zones):
        return ActionResult.denied()

    now = utc_now()
    payload = {
        "appointee_email": email,
        "appointee_name": name,
        "role": role,
        "zone_id": zone_id,
        "ward_id": ward_id,
        "appointed_by": field_of(actor, "id"),
        "status": AppointmentStatus.pending.value,
        "email_sent": False,
        "created_at": now.isoformat(),
        "expires_at": (now + timedelta(days=settings.APPOINTMENT_EXPIRY_DAYS)).isoformat(),
    }

    try:
        res = client.table(TABLE).insert(payload).execute()
    except Exception as e:
        logger.error(f"Failed to create appointment for {email}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to create appointment. Please try again.")

    appointment = res.data[0] if res.data else payload
    notify_change(TABLE, "insert", appointment.get("id"))

    # Invitation email is best-effort; the appointment stays pending on failure
    try:
        if send_appointment_invite(appointment, field_of(actor, "name")):
            sent = {"status": AppointmentStatus.sent.value, "email_sent": True, "updated_at": utc_now_iso()}
            client.table(TABLE).update(sent).eq("id", appointment.get("id")).execute()
            appointment = {**appointment, **sent}
    except Exception as e:
        logger.warning(f"Appointment invite for {email} not sent: {extract_supabase_error(e)}")

    label = ROLE_LABELS.get(role, role)
    record_activity(
        client, actor, ActivityType.appointment_created,
        f"Invited {name} to become {label}",
        target_id=appointment.get("id"),
        ward_id=ward_id,
        zone_id=zone_id,
        metadata={"appointee_email": email, "role": role},
    )

    return ActionResult.success("Appointment created", f"An invitation was created for {name}", data=appointment)


# ============================================================
# ACCEPT (public: the appointee has no session yet)
# ============================================================
def accept_appointment(
    client: Client,
    appointment_id: str,
    password: Optional[str],
    phone: Optional[str] = None,
) -> ActionResult:
    if not password or len(password) < 6:
        return ActionResult.invalid("Password must be at least 6 characters long")

    try:
        appointment = fetch_by_id(client, TABLE, appointment_id)
    except Exception as e:
        logger.error(f"Failed to load appointment {appointment_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to accept appointment. Please try again.")

    if appointment is None:
        return ActionResult.not_found("Appointment")

    if appointment.get("status") not in OPEN_APPOINTMENT_STATUSES:
        return ActionResult.invalid(f"This appointment is {appointment.get('status')}")

    expires_at = parse_timestamp(appointment.get("expires_at"))
    if expires_at is not None and expires_at < utc_now():
        try:
            client.table(TABLE).update({
                "status": AppointmentStatus.expired.value,
                "updated_at": utc_now_iso(),
            }).eq("id", appointment_id).execute()
        except Exception as e:
            logger.error(f"Failed to mark appointment {appointment_id} expired: {extract_supabase_error(e)}")
        return ActionResult.invalid("This appointment has expired")

    email = appointment.get("appointee_email")

    try:
        auth_resp = client.auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": {"name": appointment.get("appointee_name")},
        })
    except Exception as e:
        logger.error(f"Failed to create account for {email}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to create your account. Please try again.")

    user_id = auth_resp.user.id
    now = utc_now_iso()
    user_row = {
        "id": user_id,
        "email": email,
        "name": appointment.get("appointee_name"),
        "phone": phone,
        "role": appointment.get("role"),
        "zone_id": appointment.get("zone_id"),
        "ward_id": appointment.get("ward_id"),
        "verified": True,
        "verified_at": now,
        "status": AccountStatus.active.value,
        "appointed_by": appointment.get("appointed_by"),
        "appointed_at": now,
        "created_at": now,
        "updated_at": now,
    }

    try:
        res = client.table("users").insert(user_row).execute()
    except Exception as e:
        logger.error(f"Failed to create registry profile for {email}: {extract_supabase_error(e)}")
        delete_auth_user(client, user_id)
        return ActionResult.failed("Failed to accept appointment. Please try again.")

    # The account is usable from here on; a stale appointment status is only logged
    try:
        client.table(TABLE).update({
            "status": AppointmentStatus.accepted.value,
            "accepted_at": now,
            "updated_at": now,
        }).eq("id", appointment_id).execute()
    except Exception as e:
        logger.error(f"Failed to mark appointment {appointment_id} accepted: {extract_supabase_error(e)}")

    notify_change("users", "insert", user_id)
    notify_change(TABLE, "update", appointment_id)

    created = res.data[0] if res.data else user_row
    record_activity(
        client, created, ActivityType.appointment_accepted,
        f"{created.get('name')} accepted the {ROLE_LABELS.get(created.get('role'), created.get('role'))} appointment",
        target_user_id=user_id,
        target_id=appointment_id,
        ward_id=created.get("ward_id"),
        zone_id=created.get("zone_id"),
        metadata={"appointed_by": appointment.get("appointed_by"), "role": created.get("role")},
    )

    return ActionResult.success("Appointment accepted", "Your admin account is ready. You can now log in.", data=created)


# ============================================================
# CANCEL
# ============================================================
def cancel_appointment(client: Client, actor: Any, appointment_id: str) -> ActionResult:
    try:
        appointment = fetch_by_id(client, TABLE, appointment_id)
    except Exception as e:
        logger.error(f"Failed to load appointment {appointment_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to cancel appointment. Please try again.")

    if appointment is None:
        return ActionResult.not_found("Appointment")

    if not is_super_admin(actor) and appointment.get("appointed_by") != field_of(actor, "id"):
        return ActionResult.denied()

    if appointment.get("status") == AppointmentStatus.accepted.value:
        return ActionResult.invalid("Accepted appointments cannot be cancelled; revoke the admin instead")

    try:
        client.table(TABLE).delete().eq("id", appointment_id).execute()
    except Exception as e:
        logger.error(f"Failed to cancel appointment {appointment_id}: {extract_supabase_error(e)}")
        return ActionResult.failed("Failed to cancel appointment. Please try again.")

    notify_change(TABLE, "delete", appointment_id)
    record_activity(
        client, actor, ActivityType.appointment_cancelled,
        f"Cancelled the appointment for {appointment.get('appointee_name')}",
        target_id=appointment_id,
        ward_id=appointment.get("ward_id"),
        zone_id=appointment.get("zone_id"),
        metadata={"appointee_email": appointment.get("appointee_email"), "role": appointment.get("role")},
    )

    return ActionResult.success("Appointment cancelled", "The invitation has been cancelled")


# ============================================================
# EXPIRY (scheduled)
# ============================================================
def expire_appointments(client: Client) -> int:
    """Marks open appointments past expires_at as expired. Returns the count."""
    now = utc_now_iso()
    res = (
        client.table(TABLE)
        .update({"status": AppointmentStatus.expired.value, "updated_at": now})
        .in_("status", OPEN_APPOINTMENT_STATUSES)
        .lt("expires_at", now)
        .execute()
    )
    expired = len(res.data or [])
    if expired:
        notify_change(TABLE, "update")
    return expired
