import uuid
from datetime import date, datetime
from typing import Optional, List, Annotated

from pydantic import BaseModel, Field, field_validator

from app.models.task import TaskStatus, TaskPriority
from app.schemas.user import UserSummary


def _unique(ids: Optional[List[uuid.UUID]]) -> Optional[List[uuid.UUID]]:
    if ids is None:
        return None
    return list(dict.fromkeys(ids))


# ==========================================
# Request Schemas
# ==========================================


class TaskCreateTarget(BaseModel):
    """The part of a create request needed to check the actor's role"""

    project_id: uuid.UUID = Field(..., description="Project ID")


class TaskCreate(BaseModel):
    """Schema for creating a new task"""

    project_id: uuid.UUID = Field(..., description="Project ID")
    title: Annotated[str, Field(min_length=1, max_length=255, description="Task title")]
    description: Optional[str] = Field(None, description="Detailed task description")
    status: Optional[TaskStatus] = Field(None, description="Defaults to todo")
    priority: Optional[TaskPriority] = Field(None, description="Defaults to low")
    due_date: Optional[date] = Field(None, description="Task due date")
    assigned_users: Optional[List[uuid.UUID]] = Field(
        None, description="List of assigned user IDs"
    )

    @field_validator("due_date")
    @classmethod
    def validate_due_date(cls, v: Optional[date]) -> Optional[date]:
        """New tasks cannot be due in the past"""
        if v is not None and v < date.today():
            raise ValueError("Due date must be today or later")
        return v

    @field_validator("assigned_users")
    @classmethod
    def dedupe_assignees(cls, v: Optional[List[uuid.UUID]]) -> Optional[List[uuid.UUID]]:
        return _unique(v)


class TaskUpdate(BaseModel):
    """Schema for updating task information"""

    title: Annotated[Optional[str], Field(default=None, min_length=1, max_length=255)]
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[date] = None
    assigned_users: Optional[List[uuid.UUID]] = Field(
        None, description="Replacement assignee set"
    )

    @field_validator("assigned_users")
    @classmethod
    def dedupe_assignees(cls, v: Optional[List[uuid.UUID]]) -> Optional[List[uuid.UUID]]:
        return _unique(v)


class TaskStatusUpdate(BaseModel):
    """Schema for updating task status"""

    status: TaskStatus = Field(..., description="New task status")


class TaskPriorityUpdate(BaseModel):
    """Schema for updating task priority"""

    priority: TaskPriority = Field(..., description="New task priority")


class TaskAssigneesUpdate(BaseModel):
    """Schema for replacing task assignees"""

    assigned_users: List[uuid.UUID] = Field(
        ..., description="Full replacement set of assigned user IDs"
    )

    @field_validator("assigned_users")
    @classmethod
    def dedupe_assignees(cls, v: List[uuid.UUID]) -> List[uuid.UUID]:
        return _unique(v)


class TaskFilters(BaseModel):
    """Schema for task filtering"""

    project_id: Optional[uuid.UUID] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None


# ==========================================
# Response Schemas
# ==========================================


class TaskResponse(BaseModel):
    """Full task response"""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[date] = None
    assigned_users: List[UserSummary] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class TaskListItem(TaskResponse):
    """Task in list views, with comment count"""

    project_name: Optional[str] = None
    comments_count: int = 0
