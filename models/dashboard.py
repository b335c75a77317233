# models/dashboard.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class DashboardStats(BaseModel):
    """Role-scoped summary counts. verification_rate is a rounded percentage."""
    total_users: int = 0
    verified_users: int = 0
    pending_users: int = 0
    rejected_users: int = 0
    total_zones: int = 0
    total_wards: int = 0
    verification_rate: int = 0
    last_updated: Optional[datetime] = None


class DashboardSnapshot(BaseModel):
    """Payload pushed to live dashboard listeners."""
    stats: DashboardStats
    is_connected: bool = True
