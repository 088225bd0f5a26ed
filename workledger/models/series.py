from sqlalchemy import JSON, Column, DateTime, Integer

from workledger.database import Base, utcnow


class Series(Base):
    __tablename__ = "series"

    id = Column(Integer, primary_key=True, index=True)
    job_numbers = Column(JSON, nullable=False, default=list)
    # Array length, kept alongside the array so "length equals N" is an indexed lookup.
    job_count = Column(Integer, nullable=False, index=True)
    saved_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
