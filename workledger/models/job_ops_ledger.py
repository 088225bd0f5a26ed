from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Float, Integer, String

from workledger.database import Base, utcnow


class JobOpsLedger(Base):
    """One document per job number.

    ``ops`` holds one entry per operation ordered against the job::

        {"opId", "opsName", "qtyPerBook", "totalOpsQty", "pendingOpsQty",
         "valuePerBook", "creationDate", "lastUpdatedDate"}
    """

    __tablename__ = "job_ops_ledger"

    __table_args__ = (
        CheckConstraint("total_qty >= 0", name="ck_job_ops_ledger_total_qty_nonnegative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(String, nullable=False, unique=True, index=True)
    total_qty = Column(Float, nullable=False, default=0)
    ops = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
