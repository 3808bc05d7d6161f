"""
PasteShare — Paste SQLAlchemy Model
===================================

What:  ORM model representing the `pastes` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by PasteStore, ThreadResolver and Paginator, and by Alembic.

Table Design:
    - id: 63-bit signed integer allocated by IdentifierAllocator, never by the
      database. Public pastes use [1, 2^62), private pastes [2^62, 2^63).
    - title / author / language / channel: NULL when absent (not empty strings)
    - annotates: id of the thread root this paste replies to; NULL for
      top-level pastes. Always a root, never another annotation.
    - private: fixed at creation
    - created: insertion time (UTC)

    Index on (private, annotates, id):
        Serves the browse query: NOT private AND annotates IS NULL ORDER BY id DESC
    Index on annotates:
        Serves thread lookups (annotations of a root, ordinal counting)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from pasteshare.database import Base

# Sentinel id of a paste that has not been inserted yet
UNASSIGNED_ID = 0

# Smallest private paste id; private ids are drawn from [PRIVATE_ID_BASE, 2 * PRIVATE_ID_BASE)
PRIVATE_ID_BASE = 1 << 62


class Paste(Base):
    """
    A single stored text submission, public or private, optionally an
    annotation (threaded reply) of a root paste.

    Lifecycle:
        Created once through PasteStore.insert() (id assigned then), read
        many times, never updated, never deleted.

    annotation_ordinal is not a column: it is filled in per query by
    ThreadResolver / PasteStore.get_annotations() and is 0 for pastes that
    are not annotations.
    """

    __tablename__ = "pastes"

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=False,
        comment="Paste id; public ids are sequential, private ids random in the high range",
    )

    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    language: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Short syntax-highlighting language code",
    )

    channel: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    annotates: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("pastes.id"),
        nullable=True,
        comment="Root paste this paste annotates; NULL for top-level pastes",
    )

    private: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this paste was inserted (UTC)",
    )

    __table_args__ = (
        Index("idx_pastes_browse", "private", "annotates", "id"),
        Index("idx_pastes_annotates", "annotates"),
    )

    # Derived per query, not persisted
    annotation_ordinal = 0

    @property
    def is_annotation(self) -> bool:
        return self.annotates is not None

    @property
    def root_id(self) -> int:
        """Id of the thread root: the annotated paste, or this paste itself."""
        if self.annotates is not None:
            return self.annotates
        return self.id

    def __repr__(self) -> str:
        return (
            f"<Paste(id={self.id}, annotates={self.annotates}, "
            f"private={self.private}, created='{self.created}')>"
        )
