"""add job ops ledger and contractor work done

Revision ID: 8e52d7c41f93
Revises: 3c1f0a9d2b47
Create Date: 2026-03-02 10:31:44.507281

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e52d7c41f93'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b47'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "job_ops_ledger",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("job_id", sa.String(), nullable=False),
        sa.Column("total_qty", sa.Float(), nullable=False, server_default="0"),
        sa.Column("ops", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.CheckConstraint("total_qty >= 0", name="ck_job_ops_ledger_total_qty_nonnegative"),
    )
    op.create_index("ix_job_ops_ledger_id", "job_ops_ledger", ["id"], unique=False)
    op.create_index("ix_job_ops_ledger_job_id", "job_ops_ledger", ["job_id"], unique=True)

    op.create_table(
        "contractor_work_done",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("contractor_id", sa.String(), nullable=False),
        sa.Column("job_id", sa.String(), nullable=False),
        sa.Column("ops_done", sa.JSON(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.UniqueConstraint("contractor_id", "job_id", name="uq_contractor_work_done_contractor_job"),
    )
    op.create_index("ix_contractor_work_done_id", "contractor_work_done", ["id"], unique=False)
    op.create_index("ix_contractor_work_done_contractor_id", "contractor_work_done", ["contractor_id"], unique=False)
    op.create_index("ix_contractor_work_done_job_id", "contractor_work_done", ["job_id"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_contractor_work_done_job_id", table_name="contractor_work_done")
    op.drop_index("ix_contractor_work_done_contractor_id", table_name="contractor_work_done")
    op.drop_index("ix_contractor_work_done_id", table_name="contractor_work_done")
    op.drop_table("contractor_work_done")

    op.drop_index("ix_job_ops_ledger_job_id", table_name="job_ops_ledger")
    op.drop_index("ix_job_ops_ledger_id", table_name="job_ops_ledger")
    op.drop_table("job_ops_ledger")
