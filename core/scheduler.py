# core/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from core.logging_config import logger
from core.supabase_client import get_supabase_client


_scheduler = None


def get_scheduler() -> BackgroundScheduler:
    """
    Shared APScheduler background process.
    Started lazily: dashboard polling jobs and the daily expiry job share it.
    """
    global _scheduler
    if _scheduler is None:
        _scheduler = BackgroundScheduler(timezone="UTC")
    if not _scheduler.running:
        _scheduler.start()
    return _scheduler


def run_appointment_expiry():
    """Marks overdue pending/sent appointments as expired."""
    from services.appointments import expire_appointments

    client = get_supabase_client()
    if client is None:
        logger.warning("[SCHEDULER] Supabase not configured, skipping appointment expiry")
        return

    try:
        expired = expire_appointments(client)
        logger.info(f"[SCHEDULER] Expired {expired} admin appointment(s)")
    except Exception as e:
        logger.error(f"[SCHEDULER] Appointment expiry failed: {e}", exc_info=True)


def start_scheduler():
    """
    Initialize the APScheduler background process.
    Runs the appointment expiry job daily.
    """
    scheduler = get_scheduler()

    scheduler.add_job(
        run_appointment_expiry,
        trigger=CronTrigger(hour=0, minute=15),
        id="appointment_expiry_job",
        replace_existing=True,
    )

    logger.info("⏰ Scheduler started. Appointment expiry set for 00:15 UTC.")


def shutdown_scheduler():
    global _scheduler
    if _scheduler is not None and _scheduler.running:
        _scheduler.shutdown(wait=False)
    _scheduler = None
