"""
SQLAlchemy mixins shared by tenant-scoped entities.

- TenantMixin: tenant_id foreign key, filled by the create hook
- CodeMixin: code derived from tenant_id + name at creation, immutable after
"""

import re

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

_DISALLOWED = re.compile(r"[^a-z0-9_-]")
_UNDERSCORE_RUNS = re.compile(r"_+")


def generate_code(tenant_id: int, name: str) -> str:
    """
    Derive a tenant-scoped code from a display name.

    Lower-cases the name, turns spaces into underscores, drops anything
    outside [a-z0-9_-], collapses underscore runs and trims underscores
    from both ends.

        >>> generate_code(1, "My Brand")
        'tenant:1:code:my_brand'

    A name with nothing left after normalization yields an empty suffix
    ("tenant:1:code:").
    """
    normalized = name.lower().replace(" ", "_")
    normalized = _DISALLOWED.sub("", normalized)
    normalized = _UNDERSCORE_RUNS.sub("_", normalized)
    normalized = normalized.strip("_")
    return f"tenant:{tenant_id}:code:{normalized}"


class TenantMixin:
    """
    Mixin for tenant-isolated models.

    Provides:
        - tenant_id: Foreign key to tenants with cascade delete
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[int]:
        return mapped_column(
            Integer,
            ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
            comment="Owning tenant",
        )


class CodeMixin:
    """
    Mixin for models with a generated code.

    Provides:
        - code: "tenant:<tenant_id>:code:<normalized name>", unique per tenant

    Subclasses declare UniqueConstraint("tenant_id", "code") and list
    "code" in __immutable_fields__.
    """

    @declared_attr
    def code(cls) -> Mapped[str | None]:
        return mapped_column(
            String(255),
            nullable=True,
            index=True,
            comment="Generated from tenant_id and name; immutable",
        )
