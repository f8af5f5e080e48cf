from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .shared.validators import validate_email


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str


class ProfilePictureResponse(CamelModel):
    image_url: str
    message: str


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: str) -> str:
        return validate_email(v)


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str


class UserResponse(CamelModel):
    id: int
    username: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: str
    department: Optional[str] = None
    is_active: bool = True
    is_online: bool = False
    last_seen: Optional[datetime] = None
    created_at: Optional[datetime] = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class UserUpdate(CamelModel):
    """Super-admin edit of a staff user; an empty password leaves it unchanged"""

    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[str] = Field(None, pattern="^(super_admin|admin|advisor|user)$")
    department: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v)


class StatsResponse(CamelModel):
    total_clients: int
    active_projects: int
    upcoming_meetings: int
    revenue: int
