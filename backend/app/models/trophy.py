"""
Trophy API - Trophy SQLAlchemy Model
======================================

What:  ORM model representing the `trophies` table.
Why:   Maps Python objects to database rows for type-safe database operations.
Who:   Used by TrophyStore for insert, list and delete.

Table Design Rationale:
    - UUID primary key generated in Python: the id is known before commit and
      is opaque to clients (no sequential enumeration)
    - image_url: base64 payload stored inline as TEXT (images arrive embedded
      in the JSON body; there is no file storage)
    - created_at: UTC with timezone; the list endpoint sorts on it

    Index on created_at DESC:
        The only read query is "all trophies, newest first".

Generic `Uuid` / `DateTime(timezone=True)` types are used so the same model
runs on PostgreSQL (asyncpg) and SQLite (aiosqlite).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Trophy(Base):
    """
    A named trophy with an optional description and an embedded image.

    Lifecycle:
        1. Created by POST /api/trophies
        2. Listed by GET /api/trophies
        3. Deleted by DELETE /api/trophies/{id}
        Never updated in between.
    """

    __tablename__ = "trophies"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    # Base64 data (often a full data: URL); can be several megabytes
    image_url: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_trophies_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Trophy(id={self.id}, name='{self.name}', created_at='{self.created_at}')>"
