# models/activity.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ActivityRead(BaseModel):
    """
    Append-only audit record (`activities` table).
    user_id is the actor; target_user_id / target_id the affected record.
    """
    id: str
    type: str
    description: str
    user_id: Optional[str] = None
    target_user_id: Optional[str] = None
    target_id: Optional[str] = None
    ward_id: Optional[str] = None
    zone_id: Optional[str] = None
    metadata: dict = Field(default_factory=dict)
    created_at: Optional[datetime] = None
