# core/supabase_client.py

from fastapi import HTTPException
from supabase import create_client, Client
from core.config import settings
from core.logging_config import logger


# Collections probed by the health check
REGISTRY_TABLES = ["users", "wards", "zones", "activities", "admin_appointments"]


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Client:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - auth.admin.create_user (appointment acceptance)
        - auth.admin.update_user_by_id (password change)
        - auth.admin.sign_out (logout of all sessions)
        - auth.admin.delete_user (undoing a half-finished sign-up)
        - full read/write on all registry tables
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Client or 500 (routers + auth dependency)
# ============================================================

def require_supabase_client() -> Client:
    client = get_supabase_client()
    if not client:
        raise HTTPException(500, "Supabase client not configured")
    return client


# ============================================================
# Remove an auth account whose users row never got written
# ============================================================

def delete_auth_user(client: Client, user_id: str) -> bool:
    try:
        client.auth.admin.delete_user(user_id)
        return True
    except Exception as e:
        logger.error(f"Failed to remove orphaned auth account {user_id}: {e}")
        return False


# ============================================================
# Ping Supabase for health checks
# ============================================================

def ping_supabase() -> dict:
    """
    Simple connectivity check.
    Does NOT query auth tables.
    """
    client = get_supabase_client()
    if client is None:
        return {"service": "Supabase", "status": "not_configured"}

    results = {}
    for t in REGISTRY_TABLES:
        try:
            res = client.table(t).select("*").limit(1).execute()
            results[t] = {
                "status": "ok",
                "rows_found": len(res.data or [])
            }
        except Exception as err:
            results[t] = {"status": "error", "detail": str(err)}

    overall = "ok" if all(r["status"] == "ok" for r in results.values()) else "degraded"
    return {
        "service": "Supabase",
        "status": overall,
        "tables": results,
    }
