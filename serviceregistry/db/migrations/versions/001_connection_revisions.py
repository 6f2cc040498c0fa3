"""Create connection and revision tables.

Revision ID: 001
Revises:
Create Date: 2026-10-17

Tables: connection, connection_revision, connection_revision_metadata,
connection_revision_relation
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, INET

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create connection revision tables."""
    op.create_table(
        "connection",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.UniqueConstraint("name", "type", name="uq_connection_name_type"),
    )

    # One row per immutable snapshot; rows are never updated in place
    op.create_table(
        "connection_revision",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "connection_id",
            sa.Integer,
            sa.ForeignKey("connection.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("type", sa.String(50), nullable=True),
        sa.Column("revision_nr", sa.Integer, nullable=False),
        sa.Column("parent_revision_nr", sa.Integer, nullable=True),
        sa.Column("revision_note", sa.Text, nullable=False),
        sa.Column("state", sa.Text, nullable=True),
        sa.Column("expiration_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("metadata_url", sa.Text, nullable=True),
        sa.Column("metadata_valid_until", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("metadata_cache_until", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("allow_all_entities", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("arp_attributes", JSONB, nullable=True),
        sa.Column("manipulation_code", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("updated_by_user_id", sa.Integer, nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("updated_from_ip", INET, nullable=True),
        sa.UniqueConstraint("connection_id", "revision_nr", name="uq_connection_revision"),
    )
    op.create_index(
        "idx_connection_revision_connection", "connection_revision", ["connection_id"]
    )

    op.create_table(
        "connection_revision_metadata",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "revision_id",
            sa.Integer,
            sa.ForeignKey("connection_revision.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("value", sa.Text, nullable=False),
        sa.UniqueConstraint("revision_id", "name", name="uq_revision_metadata_name"),
    )

    # Append-only; duplicates of (revision, remote, kind) are allowed
    op.create_table(
        "connection_revision_relation",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column(
            "revision_id",
            sa.Integer,
            sa.ForeignKey("connection_revision.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "remote_connection_id",
            sa.Integer,
            sa.ForeignKey("connection.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("position", sa.Integer, nullable=False),
        sa.CheckConstraint(
            "kind IN ('allow', 'block', 'disable-consent')",
            name="chk_relation_kind",
        ),
    )
    op.create_index(
        "idx_revision_relation_lookup",
        "connection_revision_relation",
        ["revision_id", "kind", "position"],
    )


def downgrade() -> None:
    """Drop connection revision tables."""
    op.drop_index("idx_revision_relation_lookup", table_name="connection_revision_relation")
    op.drop_table("connection_revision_relation")
    op.drop_table("connection_revision_metadata")
    op.drop_index("idx_connection_revision_connection", table_name="connection_revision")
    op.drop_table("connection_revision")
    op.drop_table("connection")
