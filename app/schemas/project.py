import uuid
from datetime import datetime
from typing import Optional, List, Dict, Union, Annotated

from pydantic import BaseModel, Field

from app.models.project_member import ProjectRole
from app.schemas.user import UserSummary

# Either {user_id: role} or a plain list of user ids (each joins as member)
MemberAssignments = Union[Dict[uuid.UUID, ProjectRole], List[uuid.UUID]]


# ==========================================
# Request Schemas
# ==========================================


class ProjectCreate(BaseModel):
    """Schema for creating a new project"""

    name: Annotated[str, Field(min_length=1, max_length=255, description="Project name")]
    description: Optional[str] = Field(None, description="Project description")
    users: Optional[MemberAssignments] = Field(
        None, description="Members to add, with optional roles"
    )


class ProjectUpdate(BaseModel):
    """Schema for updating project details and membership"""

    name: Annotated[str, Field(min_length=1, max_length=255, description="Project name")]
    description: Optional[str] = Field(None, description="Project description")
    users: Optional[MemberAssignments] = Field(
        None, description="Replacement member set; the creator always stays owner"
    )


# ==========================================
# Response Schemas
# ==========================================


class ProjectMemberResponse(BaseModel):
    """Project member with role"""

    model_config = {"from_attributes": True}

    user_id: uuid.UUID
    role: ProjectRole
    user: UserSummary


class ProjectResponse(BaseModel):
    """Full project response"""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_by: uuid.UUID
    creator: UserSummary
    members: List[ProjectMemberResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ProjectListItem(BaseModel):
    """Project summary for list views"""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    description: Optional[str] = None
    created_by: uuid.UUID
    role: ProjectRole
    tasks_count: int = 0
    created_at: datetime
