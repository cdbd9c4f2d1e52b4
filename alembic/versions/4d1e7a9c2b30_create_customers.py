"""create customers

Revision ID: 4d1e7a9c2b30
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4d1e7a9c2b30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if not inspector.has_table("customers"):
        op.create_table(
            "customers",
            sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
            sa.Column("name", sa.String(length=255), nullable=False),
            sa.Column("phone", sa.String(length=50), nullable=True),
            sa.Column("email", sa.String(length=255), nullable=True),
            sa.Column("totalDebt", sa.Numeric(12, 2), server_default="0", nullable=False),
            sa.Column("createdAt", sa.TIMESTAMP(), server_default=sa.func.now(), nullable=True),
        )

    existing_indexes = {ix["name"] for ix in sa.inspect(bind).get_indexes("customers")}
    if "ix_customers_created_at" not in existing_indexes:
        op.create_index("ix_customers_created_at", "customers", ["createdAt"])


def downgrade() -> None:
    """Downgrade schema."""
    bind = op.get_bind()
    inspector = sa.inspect(bind)

    if inspector.has_table("customers"):
        existing_indexes = {ix["name"] for ix in inspector.get_indexes("customers")}
        if "ix_customers_created_at" in existing_indexes:
            op.drop_index("ix_customers_created_at", table_name="customers")
        op.drop_table("customers")
