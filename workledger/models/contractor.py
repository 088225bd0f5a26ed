from sqlalchemy import Boolean, Column, DateTime, Integer, String

from workledger.database import Base, utcnow


class Contractor(Base):
    __tablename__ = "contractors"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(String, nullable=False, unique=True, index=True)
    name = Column(String, nullable=False, index=True)
    creation_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False)
