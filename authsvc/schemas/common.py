"""
Common/shared Pydantic schemas.
"""

from datetime import datetime
from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Base configuration for all schemas
class BaseSchema(BaseModel):
    """
    Base schema with common configuration.

    All schemas should inherit from this.
    """

    model_config = ConfigDict(
        from_attributes=True,  # Allow ORM mode (SQLAlchemy objects)
        populate_by_name=True,  # Allow population by field name or alias
        str_strip_whitespace=True,
    )


class UpdateSchema(BaseSchema):
    """
    Partial update payload.

    Fields may be omitted, but the ones listed in `non_nullable` back NOT NULL
    columns and reject an explicit null.
    """

    non_nullable: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        nulls = [
            name for name in self.non_nullable
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulls:
            raise ValueError(f"Fields cannot be null: {', '.join(nulls)}")
        return self


class AuditRead(BaseSchema):
    """Fields every stored entity exposes."""

    id: int
    created_at: datetime
    updated_at: datetime
    created_by: int | None = None
    owned_by: int | None = None


T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """
    Generic paginated response wrapper.

    Usage:
        PaginatedResponse[RoleRead](items=roles, total=100, skip=0, limit=50)
    """

    items: list[T]
    total: int = Field(..., description="Total number of items")
    skip: int = Field(..., description="Number of items skipped")
    limit: int = Field(..., description="Maximum items per page")


class IdsRequest(BaseModel):
    """Batch lookup by primary key."""

    ids: list[int] = Field(..., max_length=500)


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str


class ErrorResponse(BaseModel):
    """Error body returned by the application exception handlers."""
    detail: str
    error: str | None = None
    details: dict | None = None
