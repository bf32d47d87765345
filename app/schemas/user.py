import uuid

from pydantic import BaseModel, EmailStr


class UserSummary(BaseModel):
    """Minimal user representation embedded in other responses"""

    model_config = {"from_attributes": True}

    id: uuid.UUID
    name: str
    email: EmailStr
