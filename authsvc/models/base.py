"""
Base model with common fields for all entities.

Provides:
- Primary key (auto-increment integer)
- Timestamps (created_at, updated_at)
- Ownership audit (created_by, owned_by)
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from authsvc.core.database import Base


class BaseModel(Base):
    """
    Abstract base model for all database tables.

    Provides common fields:
    - id: integer primary key
    - created_at: Timestamp when record was created
    - updated_at: Timestamp when record was last modified
    - created_by: User who created the record
    - owned_by: User who owns the record

    Note: This is an abstract class (no __tablename__).
    Subclasses must define __tablename__.
    """

    __abstract__ = True  # Don't create a table for this class

    # Column attributes the mutation pipeline never accepts as input
    __system_fields__ = frozenset({"id", "created_at", "updated_at"})

    # Column attributes fixed at creation
    __immutable_fields__: frozenset[str] = frozenset()

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Unique identifier"
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Timestamp when record was created"
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Timestamp when record was last updated"
    )

    # Audit ownership (plain IDs; users may be deleted independently)
    created_by: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="User who created the record"
    )

    owned_by: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="User who owns the record"
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return f"<{self.__class__.__name__}(id={self.id})>"

    def dict(self) -> dict[str, Any]:
        """
        Convert model to dictionary.

        Useful for serialization, but prefer Pydantic schemas in routes.
        """
        return {
            column.key: getattr(self, column.key)
            for column in self.__mapper__.column_attrs
        }
