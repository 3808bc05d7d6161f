"""Create pastes table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `pastes` table holding every paste and annotation.
How:   Ids are BIGINT without autoincrement; the application allocates them
       (sequential public ids, random private ids in [2^62, 2^63)).

Rollback: downgrade() drops the table entirely; all data is lost.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the pastes table with its browse and thread indexes."""
    op.create_table(
        "pastes",
        sa.Column(
            "id",
            sa.BigInteger(),
            autoincrement=False,
            nullable=False,
            comment="Paste id; public ids are sequential, private ids random in the high range",
        ),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.Text(), nullable=True),
        sa.Column(
            "language",
            sa.Text(),
            nullable=True,
            comment="Short syntax-highlighting language code",
        ),
        sa.Column("channel", sa.Text(), nullable=True),
        sa.Column(
            "annotates",
            sa.BigInteger(),
            nullable=True,
            comment="Root paste this paste annotates; NULL for top-level pastes",
        ),
        sa.Column("private", sa.Boolean(), nullable=False),
        sa.Column(
            "created",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When this paste was inserted (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["annotates"], ["pastes.id"]),
    )

    # Browse listing: NOT private AND annotates IS NULL ORDER BY id DESC
    op.create_index("idx_pastes_browse", "pastes", ["private", "annotates", "id"])

    # Thread lookups and ordinal counting
    op.create_index("idx_pastes_annotates", "pastes", ["annotates"])


def downgrade() -> None:
    """Drop the pastes table. All pastes are permanently lost."""
    op.drop_index("idx_pastes_annotates", table_name="pastes")
    op.drop_index("idx_pastes_browse", table_name="pastes")
    op.drop_table("pastes")
