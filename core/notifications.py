# core/notifications.py
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional
from core.config import settings
from core.logging_config import logger
from models.enums import ROLE_LABELS


# -----------------------------------------------------
# 📧 Send email (SMTP)
# -----------------------------------------------------
def send_email(
    subject: str,
    body: str,
    recipients: List[str],
    html_body: Optional[str] = None
) -> bool:
    """
    Send email via SMTP.

    Returns False when skipped (no recipients / SMTP not configured).
    Raises on SMTP failure.
    """
    smtp_host = settings.SMTP_HOST
    smtp_port = settings.SMTP_PORT
    smtp_user = settings.SMTP_USER
    smtp_pass = settings.SMTP_PASS

    if not recipients:
        logger.warning("No recipients specified, skipping email.")
        return False

    if not all([smtp_host, smtp_port, smtp_user, smtp_pass]):
        logger.warning("Email credentials missing, skipping email.")
        return False

    try:
        msg = MIMEMultipart('alternative')
        msg["From"] = smtp_user
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject

        msg.attach(MIMEText(body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP_SSL(smtp_host, smtp_port) as server:
            server.login(smtp_user, smtp_pass)
            server.send_message(msg)

        logger.info(f"Email sent to {', '.join(recipients)}")
        return True

    except Exception as e:
        logger.error(f"Email failed: {e}")
        raise


# -----------------------------------------------------
# 📨 Admin appointment invitation
# -----------------------------------------------------
def send_appointment_invite(appointment: dict, appointed_by_name: Optional[str] = None) -> bool:
    role_label = ROLE_LABELS.get(appointment.get("role"), appointment.get("role"))
    accept_link = f"{settings.APPOINTMENT_ACCEPT_URL}?id={appointment.get('id')}"
    inviter = appointed_by_name or "An administrator"

    body = (
        f"Hello {appointment.get('appointee_name')},\n\n"
        f"{inviter} has appointed you as {role_label}.\n"
        f"Accept the appointment and set your password here:\n{accept_link}\n\n"
        f"This invitation expires on {appointment.get('expires_at')}."
    )

    return send_email(
        subject=f"You have been appointed as {role_label}",
        body=body,
        recipients=[appointment.get("appointee_email")],
    )
