import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class NotificationResponse(BaseModel):
    """Inbox entry"""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    kind: str
    data: Dict[str, Any] = Field(default_factory=dict)
    read_at: Optional[datetime] = None
    is_read: bool = False
    created_at: datetime


class NotificationInbox(BaseModel):
    """Recipient inbox, newest first"""

    notifications: List[NotificationResponse]
    unread_count: int = Field(..., ge=0)
