"""
Pydantic schemas for authentication endpoints.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Profile of the authenticated user."""
    id: int = Field(..., description="User ID (Telegram id for mini app users)")
    username: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    role: str = "user"
    balance: float = Field(..., description="Current virtual balance")
    referrer_id: Optional[int] = Field(None, alias="referrerId")
    created_at: datetime = Field(..., alias="createdAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class MeResponse(BaseModel):
    user: UserResponse


class UpdateProfileRequest(BaseModel):
    """Request schema for POST /api/auth/update. Omitted fields are left as is."""
    username: Optional[str] = Field(None, min_length=1, max_length=64)
    first_name: Optional[str] = Field(None, alias="firstName", max_length=128)
    last_name: Optional[str] = Field(None, alias="lastName", max_length=128)

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "username": "galaxy_trader",
                "firstName": "Ada"
            }
        }
