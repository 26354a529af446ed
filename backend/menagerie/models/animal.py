"""
Menagerie Backend: Animal SQLAlchemy Model
===========================================

What:  ORM mapping of the `animals` table.
Who:   Used by the storage gateway (as the source of its columns) and by
       Alembic for the table DDL.

Table Design:
    - id:     UUID primary key, generated at insert; the only lookup key
    - name:   free text, required
    - weight: 32-bit signed integer, required, no declared range
    - diet:   free-form classification text, required

The identifier is generated on insert: `uuid4` for inserts issued through
SQLAlchemy, and `gen_random_uuid()` as the server default in the Alembic
revision for rows inserted by other clients. The API client never chooses it.
"""

import uuid

from sqlalchemy import Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from menagerie.database import Base


class Animal(Base):
    """One animal row. Never soft-deleted, never versioned."""

    __tablename__ = "animals"

    # Native UUID on PostgreSQL, CHAR(32) on SQLite
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
    diet: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Animal(id={self.id}, name='{self.name}', weight={self.weight})>"
