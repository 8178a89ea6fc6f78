"""Create posts and feedback tables

Revision ID: 001
Revises: None
Create Date: 2024-05-01 00:00:00.000000+00:00

What:  Initial schema: blog posts (unique slug) and client testimonials
       (is_approved defaults to false).
Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(320), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author", sa.String(255), nullable=False),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        # Slug collisions are rejected here and surfaced as HTTP 409
        sa.UniqueConstraint("slug", name="uq_posts_slug"),
    )
    op.create_index("idx_posts_created_at", "posts", ["created_at"])

    op.create_table(
        "feedback",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("client_name", sa.String(255), nullable=False),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("occupation", sa.String(255), nullable=True),
        sa.Column("service_taken", sa.String(255), nullable=False),
        sa.Column("feedback_content", sa.Text(), nullable=False),
        sa.Column(
            "is_approved",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_feedback_approved_created_at",
        "feedback",
        ["is_approved", "created_at"],
    )


def downgrade() -> None:
    """Drop both tables. All posts and testimonials are lost."""
    op.drop_index("idx_feedback_approved_created_at", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("idx_posts_created_at", table_name="posts")
    op.drop_table("posts")
