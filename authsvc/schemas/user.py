"""
Pydantic schemas for User.

The password is write-only: it is accepted on create/update and stored as
a bcrypt hash, and no read schema exposes it.
"""

from datetime import datetime
from typing import Literal

from pydantic import EmailStr, Field, field_validator

from authsvc.schemas.common import AuditRead, BaseSchema, UpdateSchema

UserType = Literal["admin", "staff", "vendor", "customer"]
CustomerType = Literal["individual", "corporate"]


def _check_password(v: str) -> str:
    if not any(char.isalpha() for char in v):
        raise ValueError("Password must contain at least one letter")
    if not any(char.isdigit() for char in v):
        raise ValueError("Password must contain at least one digit")
    return v


class UserCreate(BaseSchema):
    """Schema for creating a user in the caller's tenant."""

    email: EmailStr
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=8, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    address: str | None = None
    user_type: UserType = "staff"
    user_code: str | None = Field(None, max_length=20)
    company_name: str | None = Field(None, max_length=200)
    customer_type: CustomerType | None = None
    payment_terms: int | None = Field(None, ge=0)
    role_id: int | None = None
    is_active: bool = True

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _check_password(v)


class UserUpdate(UpdateSchema):
    """Schema for updating a user (all optional)."""

    non_nullable = (
        "email", "username", "password", "name", "user_type", "is_active", "email_verified",
    )

    email: EmailStr | None = None
    username: str | None = Field(None, min_length=3, max_length=50)
    password: str | None = Field(None, min_length=8, max_length=100)
    name: str | None = Field(None, min_length=1, max_length=100)
    phone: str | None = Field(None, max_length=20)
    address: str | None = None
    user_type: UserType | None = None
    user_code: str | None = Field(None, max_length=20)
    company_name: str | None = Field(None, max_length=200)
    customer_type: CustomerType | None = None
    payment_terms: int | None = Field(None, ge=0)
    role_id: int | None = None
    is_active: bool | None = None
    email_verified: bool | None = None

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        return v if v is None else _check_password(v)


class UserRead(AuditRead):
    """Schema for reading user data."""

    tenant_id: int
    email: str
    username: str
    name: str
    phone: str | None = None
    address: str | None = None
    user_type: str
    user_code: str | None = None
    company_name: str | None = None
    customer_type: str | None = None
    payment_terms: int | None = None
    is_active: bool
    email_verified: bool
    email_verified_at: datetime | None = None
    last_login: datetime | None = None
    role_id: int | None = None
