from uuid import uuid4

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Index, String, text

from workledger.database import Base, utcnow

CONVERSION_TYPES = ("1:1", "1*x", "1/x")


def _new_operation_id() -> str:
    return uuid4().hex


class Operation(Base):
    __tablename__ = "operations"

    __table_args__ = (
        CheckConstraint(
            "conversion_type IN ('1:1', '1*x', '1/x')",
            name="ck_operations_conversion_type",
        ),
        CheckConstraint("rate_per_unit >= 0", name="ck_operations_rate_nonnegative"),
        # Names are unique among active entries only; soft-deleted names may be reused.
        Index(
            "uq_operations_active_name",
            "ops_name",
            unique=True,
            postgresql_where=text("NOT is_deleted"),
            sqlite_where=text("NOT is_deleted"),
        ),
    )

    id = Column(String, primary_key=True, default=_new_operation_id)
    ops_name = Column(String, nullable=False, index=True)
    conversion_type = Column(String, nullable=False)
    rate_per_unit = Column(Float, nullable=False, default=0)

    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
