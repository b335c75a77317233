from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict
from supabase import Client

from core.supabase_client import require_supabase_client
from core.errors import extract_supabase_error
from core.logging_config import logger
from models.enums import Role, AccountStatus


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model (actor context)
# ============================================================
class CurrentUser(BaseModel):
    """
    Immutable actor context passed explicitly into the hierarchy
    resolver, permission predicates and query builders.
    """
    model_config = ConfigDict(frozen=True)

    id: str                         # Supabase Auth UID == users.id
    email: str
    role: str

    name: Optional[str] = None
    zone_id: Optional[str] = None
    ward_id: Optional[str] = None
    status: str = AccountStatus.active.value


def actor_from_row(row: dict) -> CurrentUser:
    role = row.get("role")
    if role not in Role.list():
        role = Role.member.value

    return CurrentUser(
        id=str(row["id"]),
        email=row.get("email") or "",
        role=role,
        name=row.get("name"),
        zone_id=row.get("zone_id"),
        ward_id=row.get("ward_id"),
        status=row.get("status") or AccountStatus.active.value,
    )


# ============================================================
# TOKEN → ACTOR (Supabase: validates JWT, loads the users row)
# ============================================================
def resolve_actor(client: Client, token: str) -> CurrentUser:
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    # ---------------------------------------------------------
    # Validate JWT via Supabase GoTrue
    # ---------------------------------------------------------
    try:
        auth_resp = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token validation failed: {extract_supabase_error(e)}")
        raise unauthorized

    if not auth_resp or not auth_resp.user:
        raise unauthorized

    auth_user = auth_resp.user

    # ---------------------------------------------------------
    # Load the registry profile (role + ward/zone scope)
    # ---------------------------------------------------------
    try:
        res = (
            client.table("users")
            .select("*")
            .eq("id", auth_user.id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error(f"Failed to load profile for {auth_user.id}: {extract_supabase_error(e)}")
        raise HTTPException(500, "Failed to load user profile")

    if not res.data:
        raise HTTPException(403, "No registry profile for this account")

    actor = actor_from_row(res.data[0])

    # Status governs login eligibility
    if actor.status != AccountStatus.active.value:
        raise HTTPException(403, f"Account is {actor.status}")

    return actor


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:
    client = require_supabase_client()
    return resolve_actor(client, credentials.credentials)


def get_access_token(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> str:
    return credentials.credentials

