"""
Authentication-related Pydantic schemas.
"""
from typing import Optional
from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request to create an account."""

    email: str = Field(
        ...,
        max_length=255,
        pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
        description="Account email"
    )
    password: str = Field(..., min_length=8, max_length=128, description="Account password")
    full_name: Optional[str] = Field(None, max_length=100, description="Display name")


class LoginRequest(BaseModel):
    """Request to sign in."""

    email: str = Field(..., description="Account email")
    password: str = Field(..., description="Account password")


class TokenResponse(BaseModel):
    """Bearer token issued after sign-in."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer")


class UserInfoResponse(BaseModel):
    """Public view of an account."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    full_name: Optional[str]
    created_at: datetime
