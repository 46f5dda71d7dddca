"""create notes and note_versions

Revision ID: 0001
Revises:
Create Date: 2026-10-16
"""
from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", sa.UUID(as_uuid=True), nullable=False),
        sa.Column("owner_id", sa.UUID(as_uuid=True), nullable=False),
        sa.Column("entity_id", sa.UUID(as_uuid=True), nullable=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("content_html", sa.Text(), nullable=True),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column("pinned", sa.Boolean(), nullable=False),
        sa.Column("visibility", sa.String(16), nullable=False),
        sa.Column("last_edited_by", sa.UUID(as_uuid=True), nullable=True),
        sa.Column("locked_by", sa.UUID(as_uuid=True), nullable=True),
        sa.Column("locked_by_name", sa.String(100), nullable=True),
        sa.Column("locked_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_notes_uuid", "notes", ["uuid"], unique=True)
    op.create_index("idx_notes_locked", "notes", ["locked_by", "locked_at"])
    op.create_index("idx_notes_campaign_visibility", "notes", ["campaign_id", "visibility"])
    op.create_index("idx_notes_owner_campaign", "notes", ["owner_id", "campaign_id"])

    op.create_table(
        "note_versions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.UUID(as_uuid=True), nullable=False),
        sa.Column(
            "note_id",
            sa.UUID(as_uuid=True),
            sa.ForeignKey("notes.uuid", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("author_id", sa.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("content", sa.JSON(), nullable=False),
        sa.Column("content_html", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_note_versions_uuid", "note_versions", ["uuid"], unique=True)
    op.create_index("idx_note_versions_note", "note_versions", ["note_id", "created_at"])


def downgrade():
    op.drop_index("idx_note_versions_note", table_name="note_versions")
    op.drop_index("ix_note_versions_uuid", table_name="note_versions")
    op.drop_table("note_versions")

    op.drop_index("idx_notes_owner_campaign", table_name="notes")
    op.drop_index("idx_notes_campaign_visibility", table_name="notes")
    op.drop_index("idx_notes_locked", table_name="notes")
    op.drop_index("ix_notes_uuid", table_name="notes")
    op.drop_table("notes")
