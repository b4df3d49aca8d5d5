"""
Pydantic schemas for Brand.
"""

from pydantic import Field

from authsvc.schemas.common import AuditRead, BaseSchema, UpdateSchema


class BrandCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=100)


class BrandUpdate(UpdateSchema):
    """Renaming a brand keeps its original code."""

    non_nullable = ("name",)

    name: str | None = Field(None, min_length=1, max_length=100)


class BrandRead(AuditRead):
    tenant_id: int
    name: str
    code: str | None = None
