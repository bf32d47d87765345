import uuid

from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole


class AuthUser(BaseModel):
    """
    Authenticated actor.
    Passed explicitly into every service operation.
    """

    model_config = {"from_attributes": True}

    id: uuid.UUID = Field(..., description="User ID")
    name: str = Field(..., description="Display name")
    email: EmailStr = Field(..., description="User email")
    role: UserRole = Field(UserRole.USER, description="Global role")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
