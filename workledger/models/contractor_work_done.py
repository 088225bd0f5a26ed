from sqlalchemy import JSON, Column, DateTime, Integer, String, UniqueConstraint

from workledger.database import Base, utcnow


class ContractorWorkDone(Base):
    """One document per (contractor, job).

    ``ops_done`` entries: ``{"opsId", "opsName", "valuePerBook", "opsDoneQty", "completionDate"}``.
    The row is deleted rather than kept with an empty list.
    """

    __tablename__ = "contractor_work_done"

    __table_args__ = (
        UniqueConstraint("contractor_id", "job_id", name="uq_contractor_work_done_contractor_job"),
    )

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False, index=True)
    ops_done = Column(JSON, nullable=False, default=list)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
