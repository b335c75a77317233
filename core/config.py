from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "Ward Registry API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    DASHBOARD_DOMAIN: Optional[str] = Field(
        None,
        env="DASHBOARD_DOMAIN"
    )

    REGISTRY_DOMAINS: List[str] = [
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB, Auth & Storage)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    PROFILE_PICTURE_BUCKET: str = Field("profile-pictures", env="PROFILE_PICTURE_BUCKET")
    PROFILE_PICTURE_MAX_BYTES: int = Field(5 * 1024 * 1024, env="PROFILE_PICTURE_MAX_BYTES")

    # -------------------------------------------------
    # SMTP Email Notifications (appointment invitations)
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = Field(None, env="SMTP_HOST")
    SMTP_PORT: Optional[int] = Field(None, env="SMTP_PORT")
    SMTP_USER: Optional[str] = Field(None, env="SMTP_USER")
    SMTP_PASS: Optional[str] = Field(None, env="SMTP_PASS")

    # Link included in invitation emails
    APPOINTMENT_ACCEPT_URL: str = Field(
        "http://localhost:3000/accept-appointment",
        env="APPOINTMENT_ACCEPT_URL",
    )

    # -------------------------------------------------
    # Admin appointments
    # -------------------------------------------------
    APPOINTMENT_EXPIRY_DAYS: int = Field(7, env="APPOINTMENT_EXPIRY_DAYS", description="Days before a pending appointment expires (default: 7)")

    # -------------------------------------------------
    # Dashboard
    # -------------------------------------------------
    DASHBOARD_POLL_INTERVAL_SECONDS: int = Field(30, env="DASHBOARD_POLL_INTERVAL_SECONDS", description="Polling period used while the live channel is down (default: 30)")
    DASHBOARD_ACTIVITY_LIMIT: int = Field(10, env="DASHBOARD_ACTIVITY_LIMIT")

    # -------------------------------------------------
    # Scheduler
    # -------------------------------------------------
    ENABLE_SCHEDULER: bool = Field(False, env="ENABLE_SCHEDULER")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True
        # Deployments use REAL environment variables, no .env file


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add dashboard custom domain
if settings.DASHBOARD_DOMAIN:
    domain = settings.DASHBOARD_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

# 2) add static registry domains
cors_origins.extend([d.rstrip("/") for d in settings.REGISTRY_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
