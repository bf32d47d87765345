import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field

from app.schemas.user import UserSummary


class CommentCreate(BaseModel):
    """Schema for creating a task comment"""

    task_id: uuid.UUID = Field(..., description="Task to comment on")
    message: Annotated[str, Field(min_length=1, description="Comment body")]


class CommentResponse(BaseModel):
    """Comment with author"""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    task_id: uuid.UUID
    user_id: uuid.UUID
    message: str
    author: UserSummary
    created_at: datetime
