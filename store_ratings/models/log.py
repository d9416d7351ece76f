from pydantic import BaseModel, Field
from typing import Optional
import uuid
from datetime import datetime

class ActivityLog(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    user_name: str
    action: str  # 'signed_in', 'rating_submitted', 'user_created', 'store_created', 'password_changed', etc.
    details: str  # Human-readable description of the action
    target_id: Optional[str] = None  # ID of the target entity (store_id, user_id, rating_id)
    target_type: Optional[str] = None  # 'store', 'user', 'rating', 'profile'
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
