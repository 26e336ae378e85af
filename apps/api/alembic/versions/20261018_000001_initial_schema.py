"""create research library, swipes and media jobs schema

Revision ID: 20261018_000001
Revises:
Create Date: 2026-10-18 00:00:01.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20261018_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "research_files",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("filename", sa.String(), nullable=False),
        sa.Column("mime", sa.String(), nullable=True),
        sa.Column("size_bytes", sa.Integer(), nullable=True),
        sa.Column("r2_key", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="uploaded"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_research_files_product_id"), "research_files", ["product_id"], unique=False)

    op.create_table(
        "research_items",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("category_id", sa.String(), nullable=True),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("source_url", sa.String(), nullable=True),
        sa.Column("file_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="inbox"),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["file_id"], ["research_files.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_research_items_product_id"), "research_items", ["product_id"], unique=False)
    op.create_index(op.f("ix_research_items_category_id"), "research_items", ["category_id"], unique=False)
    op.create_index(op.f("ix_research_items_file_id"), "research_items", ["file_id"], unique=False)
    op.create_index(op.f("ix_research_items_created_at"), "research_items", ["created_at"], unique=False)

    op.create_table(
        "media_jobs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="queued"),
        sa.Column("input", sa.JSON(), nullable=False),
        sa.Column("output", sa.JSON(), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("run_after", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("locked_by", sa.String(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_media_jobs_status_run_after", "media_jobs", ["status", "run_after"], unique=False)
    op.create_index("ix_media_jobs_type_status", "media_jobs", ["type", "status"], unique=False)

    op.create_table(
        "swipes",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("product_id", sa.String(), nullable=False),
        sa.Column("source", sa.String(), nullable=False, server_default="meta_ad_library"),
        sa.Column("source_url", sa.String(), nullable=False),
        sa.Column("source_id", sa.String(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="processing"),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("summary", sa.Text(), nullable=True),
        sa.Column("transcript", sa.Text(), nullable=True),
        sa.Column("headline", sa.Text(), nullable=True),
        sa.Column("ad_copy", sa.Text(), nullable=True),
        sa.Column("cta", sa.Text(), nullable=True),
        sa.Column("media_type", sa.String(), nullable=True, server_default="video"),
        sa.Column("r2_video_key", sa.String(), nullable=True),
        sa.Column("r2_video_mime", sa.String(), nullable=False, server_default="video/mp4"),
        sa.Column("r2_image_key", sa.String(), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_swipes_product_id"), "swipes", ["product_id"], unique=False)
    op.create_index(op.f("ix_swipes_status"), "swipes", ["status"], unique=False)
    op.create_index(op.f("ix_swipes_created_at"), "swipes", ["created_at"], unique=False)
    op.create_index("ix_swipes_unique_source", "swipes", ["product_id", "source", "source_url"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_swipes_unique_source", table_name="swipes")
    op.drop_index(op.f("ix_swipes_created_at"), table_name="swipes")
    op.drop_index(op.f("ix_swipes_status"), table_name="swipes")
    op.drop_index(op.f("ix_swipes_product_id"), table_name="swipes")
    op.drop_table("swipes")
    op.drop_index("ix_media_jobs_type_status", table_name="media_jobs")
    op.drop_index("ix_media_jobs_status_run_after", table_name="media_jobs")
    op.drop_table("media_jobs")
    op.drop_index(op.f("ix_research_items_created_at"), table_name="research_items")
    op.drop_index(op.f("ix_research_items_file_id"), table_name="research_items")
    op.drop_index(op.f("ix_research_items_category_id"), table_name="research_items")
    op.drop_index(op.f("ix_research_items_product_id"), table_name="research_items")
    op.drop_table("research_items")
    op.drop_index(op.f("ix_research_files_product_id"), table_name="research_files")
    op.drop_table("research_files")
