from sqlalchemy import JSON, Boolean, CheckConstraint, Column, DateTime, Integer, String

from workledger.database import Base, utcnow

BILL_NUMBER_WIDTH = 8


class Bill(Base):
    __tablename__ = "bills"

    __table_args__ = (
        CheckConstraint("payment_status IN ('Yes', 'No')", name="ck_bills_payment_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    bill_number = Column(String(BILL_NUMBER_WIDTH), nullable=False, unique=True, index=True)
    contractor_name = Column(String, nullable=False, index=True)

    payment_status = Column(String, nullable=False, default="No")
    payment_date = Column(DateTime(timezone=True), nullable=True)

    # [{"jobNumber", "clientName", "jobTitle",
    #   "ops": [{"opsName", "qtyBook", "rate", "qtyCompleted", "totalValue"}]}]
    jobs = Column(JSON, nullable=False, default=list)

    is_deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
