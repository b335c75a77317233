# services/dashboard.py

"""
Role-scoped dashboard statistics, live.

DashboardAggregator subscribes to the actor's collections on the change feed
and recomputes on every change. When the channel reports an error it switches
to an APScheduler interval job that re-runs the same scoped queries every
DASHBOARD_POLL_INTERVAL_SECONDS; when the channel recovers the job is removed
and change notifications are authoritative again.
"""

import threading
import uuid
from typing import Any, Callable, List, Optional, Tuple

from apscheduler.triggers.interval import IntervalTrigger
from supabase import Client

from core.change_feed import ChangeEvent, LocalChangeFeed, get_change_feed
from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.query_builder import (
    build_activities_query,
    build_users_query,
    build_zones_query,
    execute_query,
    fetch_wards,
)
from core.utils import utc_now
from models.activity import ActivityRead
from models.dashboard import DashboardSnapshot, DashboardStats
from models.enums import ApprovalStatus
from models.user import approval_status


SCOPED_COLLECTIONS = ["users", "zones", "wards"]

Collections = Tuple[List[dict], List[dict], List[dict]]


# ============================================================
# STATS
# ============================================================
def compute_dashboard_stats(users: List[dict], zones: List[dict], wards: List[dict]) -> DashboardStats:
    """Inputs are already scoped to the actor."""
    total = len(users)
    verified = sum(1 for u in users if approval_status(u) == ApprovalStatus.approved)
    rejected = sum(1 for u in users if approval_status(u) == ApprovalStatus.rejected)
    pending = total - verified - rejected

    return DashboardStats(
        total_users=total,
        verified_users=verified,
        pending_users=pending,
        rejected_users=rejected,
        total_zones=len(zones),
        total_wards=len(wards),
        verification_rate=round(verified / total * 100) if total else 0,
        last_updated=utc_now(),
    )


def load_scoped_collections(client: Client, actor: Any) -> Collections:
    users = execute_query(client, build_users_query(actor))
    zones = execute_query(client, build_zones_query(actor))
    wards = fetch_wards(client, actor)
    return users, zones, wards


def get_dashboard_stats(client: Client, actor: Any) -> DashboardStats:
    return compute_dashboard_stats(*load_scoped_collections(client, actor))


def recent_activities(client: Client, actor: Any, limit: Optional[int] = None) -> List[ActivityRead]:
    query = build_activities_query(actor).take(limit or settings.DASHBOARD_ACTIVITY_LIMIT)
    return [ActivityRead.model_validate(row) for row in execute_query(client, query)]


# ============================================================
# LIVE AGGREGATOR
# ============================================================
class DashboardAggregator:

    def __init__(
        self,
        loader: Callable[[], Collections],
        feed: Optional[LocalChangeFeed] = None,
        scheduler: Any = None,
        poll_interval: Optional[int] = None,
    ):
        self._loader = loader
        self._feed = feed or get_change_feed()
        self._scheduler = scheduler
        self._poll_interval = poll_interval or settings.DASHBOARD_POLL_INTERVAL_SECONDS

        self._lock = threading.Lock()
        self._unsubscribers: List[Callable[[], None]] = []
        self._listeners: List[Callable[[DashboardSnapshot], None]] = []
        self._poll_job = None
        self._job_id = f"dashboard-poll-{uuid.uuid4().hex}"

        self.stats: Optional[DashboardStats] = None
        self.is_connected = True
        self.closed = False

    # ---------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------
    def start(self):
        for collection in SCOPED_COLLECTIONS:
            self._unsubscribers.append(
                self._feed.subscribe(
                    collection,
                    on_change=self._on_change,
                    on_error=self._on_channel_error,
                    on_restore=self._on_channel_restored,
                )
            )

        # No live channel: poll from the start so writes made elsewhere show up
        if not self._feed.connected:
            self._on_channel_error(RuntimeError("realtime channel unavailable"))

        self.refresh()

    def stop(self):
        with self._lock:
            self.closed = True
            unsubscribers, self._unsubscribers = self._unsubscribers, []
            self._listeners = []
        for unsubscribe in unsubscribers:
            unsubscribe()
        self._stop_polling()

    def add_listener(self, listener: Callable[[DashboardSnapshot], None]):
        with self._lock:
            self._listeners.append(listener)

    @property
    def last_updated(self):
        return self.stats.last_updated if self.stats else None

    @property
    def is_polling(self) -> bool:
        return self._poll_job is not None

    # ---------------------------------------------------------
    # Recompute
    # ---------------------------------------------------------
    def refresh(self) -> Optional[DashboardStats]:
        if self.closed:
            return None

        try:
            users, zones, wards = self._loader()
        except Exception as e:
            # Keep the previous snapshot; next change or poll retries
            logger.error(f"Dashboard refresh failed: {extract_supabase_error(e)}")
            return self.stats

        stats = compute_dashboard_stats(users, zones, wards)

        with self._lock:
            if self.closed:
                return None
            self.stats = stats
            snapshot = DashboardSnapshot(stats=stats, is_connected=self.is_connected)
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Dashboard listener failed: {e}", exc_info=True)

        return stats

    def _on_change(self, event: ChangeEvent):
        self.refresh()

    # ---------------------------------------------------------
    # Connectivity fallback
    # ---------------------------------------------------------
    def _on_channel_error(self, error: Exception):
        with self._lock:
            if self.closed:
                return
            self.is_connected = False
        self._start_polling()

    def _on_channel_restored(self):
        with self._lock:
            if self.closed:
                return
            self.is_connected = True
        self._stop_polling()
        self.refresh()

    def _start_polling(self):
        with self._lock:
            if self._poll_job is not None or self.closed:
                return
            if self._scheduler is None:
                from core.scheduler import get_scheduler
                self._scheduler = get_scheduler()
            self._poll_job = self._scheduler.add_job(
                self.refresh,
                trigger=IntervalTrigger(seconds=self._poll_interval),
                id=self._job_id,
                replace_existing=True,
            )
        logger.info(f"Dashboard polling every {self._poll_interval}s")

    def _stop_polling(self):
        with self._lock:
            job, self._poll_job = self._poll_job, None
        if job is None:
            return
        try:
            self._scheduler.remove_job(self._job_id)
        except Exception as e:
            logger.warning(f"Dashboard poll job already gone: {e}")
        logger.info("Dashboard polling stopped")
