# routers/health.py

from fastapi import APIRouter
from core.supabase_client import ping_supabase
from core.change_feed import get_change_feed

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks Supabase connection + table queries
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Supabase / DB health check")
def health_db():
    """
    Verifies full Supabase connectivity.
    - Checks if URL + key are configured
    - Attempts to query each registry table
    - Returns row-count + error details per table
    """
    status = ping_supabase()
    return {
        "service": "Supabase",
        "status": status.get("status", "unknown"),
        "details": status,
    }


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    feed = get_change_feed()
    return {
        "service": "Ward Registry API",
        "status": "ok",
        "realtime_connected": feed.connected,
        "live_subscriptions": feed.subscriber_count(),
    }
