from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime


# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str = Field(min_length=1)


# Schema for user registration requests
class UserCreate(UserBase):
    name: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=6)

    @field_validator("password")
    @classmethod
    def _check_password_length(cls, value: str) -> str:
        # bcrypt only accepts up to 72 bytes
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return value

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


# Public summary of a user account
class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class ProfileResponse(UserSummary):
    created_at: Optional[datetime] = None


class LoginResponse(BaseModel):
    message: str
    user: UserSummary


class RegisterResponse(BaseModel):
    message: str
    user: UserSummary
