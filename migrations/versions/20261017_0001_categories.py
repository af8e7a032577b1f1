# migrations/versions/20261017_0001_categories.py
"""Create the categories table (hierarchical, audited, soft-deletable)."""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

from personal_blog.config.settings import get_settings

# Revision identifiers, used by Alembic.
revision = "20261017_0001_categories"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    schema = get_settings().db_schema
    parent_ref = f"{schema}.categories.id" if schema else "categories.id"

    op.create_table(
        "categories",
        sa.Column("id", sa.BigInteger().with_variant(sa.Integer(), "sqlite"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("slug", sa.String(length=200), nullable=False),
        sa.Column("description", sa.String(length=500), nullable=True),
        sa.Column("color_code", sa.String(length=7), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("meta_title", sa.String(length=70), nullable=True),
        sa.Column("meta_description", sa.String(length=160), nullable=True),
        sa.Column("meta_keywords", sa.String(length=255), nullable=True),
        sa.Column(
            "parent_id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            nullable=True,
        ),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_categories"),
        sa.UniqueConstraint("slug", name="uq_categories_slug"),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            [parent_ref],
            name="fk_categories_parent_id_categories",
        ),
        schema=schema,
    )

    op.create_index("idx_category_name", "categories", ["name"], schema=schema)
    op.create_index("idx_category_parent", "categories", ["parent_id"], schema=schema)
    op.create_index("idx_category_display_order", "categories", ["display_order"], schema=schema)
    op.create_index("ix_categories_deleted", "categories", ["deleted"], schema=schema)


def downgrade() -> None:
    schema = get_settings().db_schema
    op.drop_index("ix_categories_deleted", table_name="categories", schema=schema)
    op.drop_index("idx_category_display_order", table_name="categories", schema=schema)
    op.drop_index("idx_category_parent", table_name="categories", schema=schema)
    op.drop_index("idx_category_name", table_name="categories", schema=schema)
    op.drop_table("categories", schema=schema)
