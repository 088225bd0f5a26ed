"""add operations and contractors

Revision ID: 3c1f0a9d2b47
Revises:
Create Date: 2026-03-02 10:14:08.112930

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a9d2b47'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "operations",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("ops_name", sa.String(), nullable=False),
        sa.Column("conversion_type", sa.String(), nullable=False),
        sa.Column("rate_per_unit", sa.Float(), nullable=False, server_default="0"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint(
            "conversion_type IN ('1:1', '1*x', '1/x')",
            name="ck_operations_conversion_type",
        ),
        sa.CheckConstraint("rate_per_unit >= 0", name="ck_operations_rate_nonnegative"),
    )
    op.create_index("ix_operations_ops_name", "operations", ["ops_name"], unique=False)
    op.create_index(
        "uq_operations_active_name",
        "operations",
        ["ops_name"],
        unique=True,
        postgresql_where=sa.text("NOT is_deleted"),
        sqlite_where=sa.text("NOT is_deleted"),
    )

    op.create_table(
        "contractors",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("contractor_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("creation_date", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_contractors_id", "contractors", ["id"], unique=False)
    op.create_index("ix_contractors_contractor_id", "contractors", ["contractor_id"], unique=True)
    op.create_index("ix_contractors_name", "contractors", ["name"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_contractors_name", table_name="contractors")
    op.drop_index("ix_contractors_contractor_id", table_name="contractors")
    op.drop_index("ix_contractors_id", table_name="contractors")
    op.drop_table("contractors")

    op.drop_index("uq_operations_active_name", table_name="operations")
    op.drop_index("ix_operations_ops_name", table_name="operations")
    op.drop_table("operations")
