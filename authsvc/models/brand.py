"""
Brand model.
"""

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from authsvc.models.base import BaseModel
from authsvc.models.mixins import CodeMixin, TenantMixin


class Brand(CodeMixin, TenantMixin, BaseModel):
    """Tenant-scoped brand; its code is generated from the name on create."""

    __tablename__ = "brands"
    __immutable_fields__ = frozenset({"code"})

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Brand name"
    )

    __table_args__ = (
        UniqueConstraint("tenant_id", "code", name="uq_brand_tenant_code"),
    )

    def __repr__(self) -> str:
        return f"<Brand(id={self.id}, code={self.code})>"
