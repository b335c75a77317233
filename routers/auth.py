from fastapi import APIRouter, HTTPException, Depends, File, UploadFile

from core.supabase_client import require_supabase_client
from core.permission_helpers import get_effective_permissions, visible_navigation
from core.notices import to_response
from core.logging_config import logger
from dependencies.auth import get_current_user, get_access_token, CurrentUser
from models.auth import LoginRequest, TokenResponse
from models.user import ProfileUpdate, PasswordChange
from services.profile import (
    update_profile,
    change_password,
    upload_profile_picture,
    logout_all_sessions,
)


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# LOGIN (SUPABASE AUTH)
# ============================================================
@router.post("/login", response_model=TokenResponse, summary="Authenticate user")
def login(payload: LoginRequest):

    email = str(payload.email).strip().lower()
    client = require_supabase_client()

    try:
        response = client.auth.sign_in_with_password(
            {"email": email, "password": payload.password}
        )
    except Exception as e:
        # Log the error for debugging but don't expose details to user
        logger.warning(f"Login attempt failed for {email}: {type(e).__name__}")
        raise HTTPException(
            status_code=401,
            detail="Invalid email or password"
        )

    if not response.session or not response.session.access_token:
        raise HTTPException(401, "Invalid email or password")

    return TokenResponse(access_token=response.session.access_token)


# ============================================================
# CURRENT USER
# ============================================================
@router.get("/me", response_model=CurrentUser, summary="Current authenticated user")
def read_me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user


@router.patch("/me", summary="Update current user profile")
def update_me(
    payload: ProfileUpdate,
    current_user: CurrentUser = Depends(get_current_user),
):
    """
    Self-service edit of name, phone and address.
    Role and ward/zone assignment are changed by admins only.
    """
    client = require_supabase_client()
    result = update_profile(client, current_user, payload.model_dump(exclude_unset=True))
    return to_response(result)


@router.post("/change-password", summary="Change password (re-verifies current password)")
def change_my_password(
    payload: PasswordChange,
    current_user: CurrentUser = Depends(get_current_user),
):
    client = require_supabase_client()
    result = change_password(
        client,
        current_user,
        payload.current_password,
        payload.new_password,
        payload.confirm_password,
    )
    return to_response(result)


@router.post("/me/picture", summary="Upload profile picture")
async def upload_my_picture(
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
):
    content = await file.read()
    client = require_supabase_client()
    result = upload_profile_picture(
        client,
        current_user,
        file.filename or "picture",
        file.content_type,
        content,
    )
    return to_response(result)


@router.post("/logout-all", summary="Log out of every session")
def logout_everywhere(
    current_user: CurrentUser = Depends(get_current_user),
    token: str = Depends(get_access_token),
):
    client = require_supabase_client()
    return to_response(logout_all_sessions(client, current_user, token))


# ============================================================
# NAVIGATION (role-filtered sidebar)
# ============================================================
@router.get("/navigation", summary="Dashboard sections visible to the current user")
def navigation(current_user: CurrentUser = Depends(get_current_user)):
    return {
        "role": current_user.role,
        "permissions": sorted(get_effective_permissions(current_user)),
        "items": visible_navigation(current_user),
    }
