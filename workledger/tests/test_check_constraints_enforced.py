import pytest
from sqlalchemy.exc import IntegrityError

from workledger.database import SessionLocal
from workledger.models.bill import Bill
from workledger.models.contractor_work_done import ContractorWorkDone
from workledger.models.job_ops_ledger import JobOpsLedger
from workledger.models.operation import Operation


def test_check_constraint_blocks_unknown_conversion_type():
    db = SessionLocal()
    try:
        db.add(Operation(ops_name="Stitch", conversion_type="2:1", rate_per_unit=1))

        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()


def test_check_constraint_blocks_negative_job_quantity():
    db = SessionLocal()
    try:
        db.add(JobOpsLedger(job_id="J-CK", total_qty=-1, ops=[]))

        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()


def test_check_constraint_blocks_unknown_payment_status():
    db = SessionLocal()
    try:
        db.add(Bill(bill_number="00000001", contractor_name="Ravi", payment_status="Maybe", jobs=[]))

        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()


def test_one_work_done_document_per_contractor_and_job():
    db = SessionLocal()
    try:
        db.add(ContractorWorkDone(contractor_id="C1", job_id="J1", ops_done=[]))
        db.commit()

        db.add(ContractorWorkDone(contractor_id="C1", job_id="J1", ops_done=[]))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()


def test_active_operation_names_are_unique():
    db = SessionLocal()
    try:
        db.add(Operation(ops_name="Fold", conversion_type="1:1", rate_per_unit=1, is_deleted=True))
        db.add(Operation(ops_name="Fold", conversion_type="1:1", rate_per_unit=1))
        db.commit()

        db.add(Operation(ops_name="Fold", conversion_type="1*x", rate_per_unit=2))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()
    finally:
        db.close()
