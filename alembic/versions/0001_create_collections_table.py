"""
Create collections table with embedded card documents.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# --- Alembic identifiers ---
revision = "0001_create_collections_table"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "collections",
        sa.Column("id", sa.String(length=32), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=255), nullable=False),
        sa.Column("cards", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.text("timezone('utc', now())")),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.text("timezone('utc', now())")),
    )

    op.create_index("ix_collections_name", "collections", ["name"])
    op.create_index("ix_collections_owner", "collections", ["owner"])


def downgrade():
    op.drop_index("ix_collections_owner", table_name="collections")
    op.drop_index("ix_collections_name", table_name="collections")
    op.drop_table("collections")
