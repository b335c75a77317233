# tests/test_notifications.py

"""
Tests for invitation emails and the appointment expiry job.
"""

from unittest.mock import patch

from core.config import settings
from core.notifications import send_appointment_invite, send_email
from core.scheduler import run_appointment_expiry


APPOINTMENT = {
    "id": "appt-1",
    "appointee_email": "ada@example.com",
    "appointee_name": "Ada",
    "role": "zonalAdmin",
    "expires_at": "2024-03-12T00:00:00+00:00",
}


def test_send_email_skipped_without_smtp_settings():
    with patch.object(settings, "SMTP_HOST", None):
        assert send_email("Subject", "Body", ["ada@example.com"]) is False


def test_send_email_skipped_without_recipients():
    assert send_email("Subject", "Body", []) is False


def test_appointment_invite_goes_out_over_smtp():
    with patch.object(settings, "SMTP_HOST", "smtp.example.com"), \
         patch.object(settings, "SMTP_PORT", 465), \
         patch.object(settings, "SMTP_USER", "noreply@example.com"), \
         patch.object(settings, "SMTP_PASS", "secret"), \
         patch("core.notifications.smtplib.SMTP_SSL") as mock_smtp:
        assert send_appointment_invite(APPOINTMENT, "Sam Super") is True

    server = mock_smtp.return_value.__enter__.return_value
    server.login.assert_called_once_with("noreply@example.com", "secret")
    message = server.send_message.call_args.args[0]
    assert message["Subject"] == "You have been appointed as Zonal Admin"
    assert message["To"] == "ada@example.com"


def test_expiry_job_uses_supabase(fake_supabase):
    fake_supabase.tables["admin_appointments"].append(
        {"id": "old", "status": "sent", "expires_at": "2000-01-01T00:00:00+00:00"}
    )

    with patch("core.scheduler.get_supabase_client", return_value=fake_supabase):
        run_appointment_expiry()

    assert fake_supabase.row("admin_appointments", "old")["status"] == "expired"


def test_expiry_job_skips_without_supabase():
    with patch("core.scheduler.get_supabase_client", return_value=None):
        run_appointment_expiry()
