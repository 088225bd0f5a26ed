"""add bills and series

Revision ID: b7a4e90c5d16
Revises: 8e52d7c41f93
Create Date: 2026-03-04 16:02:19.874415

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7a4e90c5d16'
down_revision: Union[str, Sequence[str], None] = '8e52d7c41f93'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "bills",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("bill_number", sa.String(length=8), nullable=False),
        sa.Column("contractor_name", sa.String(), nullable=False),
        sa.Column("payment_status", sa.String(), nullable=False, server_default="No"),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("jobs", sa.JSON(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("payment_status IN ('Yes', 'No')", name="ck_bills_payment_status"),
    )
    op.create_index("ix_bills_id", "bills", ["id"], unique=False)
    op.create_index("ix_bills_bill_number", "bills", ["bill_number"], unique=True)
    op.create_index("ix_bills_contractor_name", "bills", ["contractor_name"], unique=False)
    op.create_index("ix_bills_is_deleted", "bills", ["is_deleted"], unique=False)

    op.create_table(
        "series",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("job_numbers", sa.JSON(), nullable=False),
        sa.Column("job_count", sa.Integer(), nullable=False),
        sa.Column("saved_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
    )
    op.create_index("ix_series_id", "series", ["id"], unique=False)
    op.create_index("ix_series_job_count", "series", ["job_count"], unique=False)
    op.create_index("ix_series_saved_at", "series", ["saved_at"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_series_saved_at", table_name="series")
    op.drop_index("ix_series_job_count", table_name="series")
    op.drop_index("ix_series_id", table_name="series")
    op.drop_table("series")

    op.drop_index("ix_bills_is_deleted", table_name="bills")
    op.drop_index("ix_bills_contractor_name", table_name="bills")
    op.drop_index("ix_bills_bill_number", table_name="bills")
    op.drop_index("ix_bills_id", table_name="bills")
    op.drop_table("bills")
