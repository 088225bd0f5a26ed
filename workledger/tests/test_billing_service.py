import pytest

from workledger.core.errors import ConflictError, NotFoundError, ValidationError
from workledger.models.bill import Bill
from workledger.models.contractor_work_done import ContractorWorkDone
from workledger.schemas.bill import BillResponse
from workledger.services import billing_service
from workledger.services.job_ops_service import assign_operations, get_ledger
from workledger.services.work_recorder import record_work


def _jobs(job_number="J1", ops_name="Binding", rate=2.5, qty_completed=10):
    return [
        {
            "jobNumber": job_number,
            "clientName": "Acme",
            "jobTitle": "Annual report",
            "ops": [
                {
                    "opsName": ops_name,
                    "qtyBook": 4,
                    "rate": rate,
                    "qtyCompleted": qty_completed,
                    "totalValue": rate * qty_completed,
                }
            ],
        }
    ]


def _seed_and_record(db, operation_factory, contractor_factory, *, pending=25, done=10):
    contractor = contractor_factory(name="Ravi")
    binding = operation_factory(name="Binding", conversion_type="1/x", rate=2.5)
    assign_operations(
        db,
        job_number="J1",
        qty=pending * 4,
        operations=[{"operationId": binding.id, "qtyPerBook": 4, "ratePerBook": 2.5}],
    )
    record_work(
        db,
        contractor_id=contractor.contractor_id,
        job_number="J1",
        operations=[{"opId": binding.id, "opsName": "Binding", "valuePerBook": 2.5, "qtyToAdd": done}],
    )
    return contractor, binding


def _work_done(db, contractor_id, job_id="J1"):
    db.expire_all()
    return (
        db.query(ContractorWorkDone)
        .filter(ContractorWorkDone.contractor_id == contractor_id, ContractorWorkDone.job_id == job_id)
        .first()
    )


def test_first_bill_number_is_zero_padded_one(db):
    assert billing_service.next_bill_number(db) == "00000001"

    bill = billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())
    assert bill.bill_number == "00000001"
    assert bill.payment_status == billing_service.UNPAID
    assert bill.payment_date is None


def test_consecutive_bills_get_consecutive_numbers(db):
    numbers = [billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs()).bill_number for _ in range(3)]
    assert numbers == ["00000001", "00000002", "00000003"]


def test_deleted_bill_numbers_are_not_reused(db, contractor_factory):
    contractor_factory(name="Ravi")
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())
    billing_service.delete_bill(db, "00000002")

    assert billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs()).bill_number == "00000003"
    assert [b.bill_number for b in billing_service.list_bills(db)] == ["00000003", "00000001"]


def test_creating_a_bill_does_not_touch_ledgers(db, operation_factory, contractor_factory):
    contractor, _ = _seed_and_record(db, operation_factory, contractor_factory)

    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())

    db.expire_all()
    assert get_ledger(db, "J1").ops[0]["pendingOpsQty"] == 15
    assert _work_done(db, contractor.contractor_id).ops_done[0]["opsDoneQty"] == 10


@pytest.mark.parametrize(
    "contractor_name,jobs",
    [
        ("", _jobs()),
        ("Ravi", []),
        ("Ravi", [{"jobNumber": "", "ops": _jobs()[0]["ops"]}]),
        ("Ravi", [{"jobNumber": "J1", "ops": []}]),
        ("Ravi", [{"jobNumber": "J1", "ops": [{"opsName": "", "qtyBook": 1, "rate": 1, "qtyCompleted": 1, "totalValue": 1}]}]),
        ("Ravi", [{"jobNumber": "J1", "ops": [{"opsName": "A", "qtyBook": 1, "rate": 1, "qtyCompleted": 1}]}]),
        ("Ravi", [{"jobNumber": "J1", "ops": [{"opsName": "A", "qtyBook": 1, "rate": "x", "qtyCompleted": 1, "totalValue": 1}]}]),
        ("Ravi", [{"jobNumber": "J1", "ops": [{"opsName": "A", "qtyBook": 1, "rate": 1, "qtyCompleted": -1, "totalValue": 1}]}]),
    ],
)
def test_invalid_bills_are_rejected(db, contractor_name, jobs):
    with pytest.raises(ValidationError):
        billing_service.create_bill(db, contractor_name=contractor_name, jobs=jobs)
    assert db.query(Bill).count() == 0


def test_update_replaces_name_and_snapshot_only(db):
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())

    row = billing_service.update_bill(db, "00000001", contractor_name=" Mohan ", jobs=_jobs(qty_completed=4))

    assert row.contractor_name == "Mohan"
    assert row.jobs[0]["ops"][0]["qtyCompleted"] == 4
    assert row.payment_status == billing_service.UNPAID

    with pytest.raises(NotFoundError):
        billing_service.update_bill(db, "00000099", contractor_name="X")


def test_mark_paid_sets_status_and_date(db):
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())

    row = billing_service.mark_paid(db, "00000001")

    assert row.payment_status == billing_service.PAID
    assert row.payment_date is not None


def test_colliding_bill_number_is_a_conflict(db, monkeypatch):
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())
    monkeypatch.setattr(billing_service, "next_bill_number", lambda _db: "00000001")

    with pytest.raises(ConflictError):
        billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())
    assert db.query(Bill).count() == 1


def test_delete_reverses_quantities_into_both_ledgers(db, operation_factory, contractor_factory):
    contractor, _ = _seed_and_record(db, operation_factory, contractor_factory, pending=25, done=10)
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs(qty_completed=4))

    result = billing_service.delete_bill(db, "00000001")

    assert result.contractor_id == contractor.contractor_id
    assert result.unmatched == []
    db.expire_all()
    assert get_ledger(db, "J1").ops[0]["pendingOpsQty"] == 19
    assert _work_done(db, contractor.contractor_id).ops_done[0]["opsDoneQty"] == 6
    assert billing_service.get_bill(db, "00000001").is_deleted is True
    assert billing_service.list_bills(db) == []


def test_delete_drops_emptied_work_done_document(db, operation_factory, contractor_factory):
    contractor, _ = _seed_and_record(db, operation_factory, contractor_factory, pending=25, done=10)
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs(qty_completed=10))

    billing_service.delete_bill(db, "00000001")

    assert _work_done(db, contractor.contractor_id) is None
    assert get_ledger(db, "J1").ops[0]["pendingOpsQty"] == 25


def test_delete_matches_on_rounded_rate(db, operation_factory, contractor_factory):
    contractor, _ = _seed_and_record(db, operation_factory, contractor_factory, pending=25, done=10)
    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs(ops_name="Binding ", rate=2.504, qty_completed=5))

    result = billing_service.delete_bill(db, "00000001")

    assert result.unmatched == []
    assert _work_done(db, contractor.contractor_id).ops_done[0]["opsDoneQty"] == 5


def test_unmatched_lines_are_skipped_and_reported(db, operation_factory, contractor_factory):
    contractor, _ = _seed_and_record(db, operation_factory, contractor_factory, pending=25, done=10)
    jobs = _jobs(qty_completed=2)
    jobs[0]["ops"].append({"opsName": "Lamination", "qtyBook": 1, "rate": 9, "qtyCompleted": 3, "totalValue": 27})
    jobs.append(_jobs(job_number="J-UNKNOWN")[0])
    billing_service.create_bill(db, contractor_name="Ravi", jobs=jobs)

    result = billing_service.delete_bill(db, "00000001")

    assert len(result.lines) == 3
    assert [(l.ops_name, l.job_number) for l in result.unmatched] == [("Lamination", "J1"), ("Binding", "J-UNKNOWN")]
    lamination = result.unmatched[0]
    assert lamination.pending_status == "skipped"
    assert lamination.pending_reason == "no matching ledger entry"
    # the matched line is still reversed
    db.expire_all()
    assert get_ledger(db, "J1").ops[0]["pendingOpsQty"] == 17
    assert _work_done(db, contractor.contractor_id).ops_done[0]["opsDoneQty"] == 8


def test_delete_requires_known_contractor_and_live_bill(db, contractor_factory):
    billing_service.create_bill(db, contractor_name="Nobody", jobs=_jobs())

    with pytest.raises(NotFoundError):
        billing_service.delete_bill(db, "00000001")
    db.expire_all()
    assert billing_service.get_bill(db, "00000001").is_deleted is False

    contractor_factory(name="Nobody")
    billing_service.delete_bill(db, "00000001")
    with pytest.raises(NotFoundError):
        billing_service.delete_bill(db, "00000001")
    with pytest.raises(NotFoundError):
        billing_service.delete_bill(db, "00000042")


def test_pending_never_goes_negative_and_is_restored_after_clamp(db, operation_factory, contractor_factory):
    contractor, _ = _seed_and_record(db, operation_factory, contractor_factory, pending=5, done=20)
    assert get_ledger(db, "J1").ops[0]["pendingOpsQty"] == 0

    billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs(qty_completed=20))
    billing_service.delete_bill(db, "00000001")

    db.expire_all()
    # reversal adds back the full claim, which can exceed what was pending before the claim
    assert get_ledger(db, "J1").ops[0]["pendingOpsQty"] == 20
    assert _work_done(db, contractor.contractor_id) is None


def test_bill_response_reads_columns_from_the_row(db):
    row = billing_service.create_bill(db, contractor_name="Ravi", jobs=_jobs())

    body = BillResponse.model_validate(row).model_dump(mode="json")

    assert body["billNumber"] == "00000001"
    assert body["contractorName"] == "Ravi"
    assert body["paymentStatus"] == "No"
    assert body["paymentDate"] is None
    assert body["jobs"][0]["ops"][0]["opsName"] == "Binding"
    assert body["isDeleted"] is False
