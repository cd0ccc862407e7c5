"""
Pydantic schemas for account request/response validation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from tablebook.domain.records import Role


class CustomerSignup(BaseModel):
    login_id: str = Field(..., min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_.-]+$")
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)


class OwnerSignup(CustomerSignup):
    venue_name: str = Field(..., min_length=1, max_length=255)
    capacity: Optional[int] = Field(None, ge=0, le=10000)
    address: str = Field("", max_length=500)
    image_url: Optional[str] = Field(None, max_length=1000)


class UserLogin(BaseModel):
    login_id: str
    password: str


class UserResponse(BaseModel):
    id: str
    login_id: str
    email: str
    name: str
    role: Role
    phone: Optional[str]
    venue_id: Optional[int]
    created_at: Optional[datetime]

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
