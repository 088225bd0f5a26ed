from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workledger.core.errors import ConflictError, NotFoundError, ValidationError
from workledger.models.bill import BILL_NUMBER_WIDTH, Bill
from workledger.models.contractor_work_done import ContractorWorkDone
from workledger.models.job_ops_ledger import JobOpsLedger
from workledger.services import catalog_service
from workledger.services.contractor_service import resolve_contractor_id
from workledger.services.job_ops_service import find_ledger_entry
from workledger.services.numbers import is_blank, to_number
from workledger.services.operation_matcher import find_work_done_match

logger = logging.getLogger(__name__)

PAID = "Yes"
UNPAID = "No"

_NUMERIC_FIELDS = ("qtyBook", "rate", "qtyCompleted", "totalValue")


# ---------- Validation ----------

def _validated_jobs(jobs: Any) -> List[dict]:
    """Normalized snapshot of the submitted jobs; raises ValidationError on the first bad field."""
    if not isinstance(jobs, list) or not jobs:
        raise ValidationError("At least one job is required")

    snapshot = []
    for job in jobs:
        if not isinstance(job, dict) or is_blank(job.get("jobNumber")):
            raise ValidationError("Each job must have a job number")

        ops = job.get("ops")
        if not isinstance(ops, list) or not ops:
            raise ValidationError("Each job must have at least one operation")

        op_lines = []
        for op in ops:
            if not isinstance(op, dict) or is_blank(op.get("opsName")):
                raise ValidationError("Each operation must have an operation name (opsName)")
            if any(op.get(name) is None for name in _NUMERIC_FIELDS):
                raise ValidationError("Each operation must have qtyBook, rate, qtyCompleted, and totalValue")

            values = {name: to_number(op.get(name)) for name in _NUMERIC_FIELDS}
            if any(v is None for v in values.values()):
                raise ValidationError("All operation fields must be valid numbers")
            if any(v < 0 for v in values.values()):
                raise ValidationError("All operation values must be non-negative")

            op_lines.append({"opsName": str(op["opsName"]).strip(), **values})

        snapshot.append(
            {
                "jobNumber": str(job["jobNumber"]).strip(),
                "clientName": str(job.get("clientName") or ""),
                "jobTitle": str(job.get("jobTitle") or ""),
                "ops": op_lines,
            }
        )
    return snapshot


def _validated_contractor_name(contractor_name: Any) -> str:
    if is_blank(contractor_name):
        raise ValidationError("Contractor name is required")
    return str(contractor_name).strip()


# ---------- Numbering ----------

def next_bill_number(db: Session) -> str:
    """
    Highest existing number + 1, zero-padded. Deleted bills still count, so
    numbers are never reused. Not reserved: two callers can get the same value.
    """
    last = db.query(Bill.bill_number).order_by(Bill.bill_number.desc()).first()
    if last is None:
        return "1".zfill(BILL_NUMBER_WIDTH)
    return str(int(last.bill_number) + 1).zfill(BILL_NUMBER_WIDTH)


# ---------- Queries ----------

def list_bills(db: Session) -> List[Bill]:
    return (
        db.query(Bill)
        .filter(Bill.is_deleted.is_(False))
        .order_by(Bill.bill_number.desc())
        .all()
    )


def get_bill(db: Session, bill_number: str, *, include_deleted: bool = True) -> Bill:
    q = db.query(Bill).filter(Bill.bill_number == str(bill_number).strip())
    if not include_deleted:
        q = q.filter(Bill.is_deleted.is_(False))
    row = q.first()
    if row is None:
        raise NotFoundError("Bill not found" if include_deleted else "Bill not found or already deleted")
    return row


# ---------- Mutations ----------

def create_bill(db: Session, *, contractor_name: Any, jobs: Any) -> Bill:
    """Store a snapshot of previously recorded work. Does not touch either ledger."""
    name = _validated_contractor_name(contractor_name)
    snapshot = _validated_jobs(jobs)

    bill_number = next_bill_number(db)
    row = Bill(
        bill_number=bill_number,
        contractor_name=name,
        payment_status=UNPAID,
        payment_date=None,
        jobs=snapshot,
        is_deleted=False,
    )
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning("Bill number collision", extra={"bill_number": bill_number})
        raise ConflictError("Bill number already exists", context={"bill_number": bill_number}) from exc
    db.refresh(row)

    logger.info("Bill created", extra={"bill_number": bill_number, "contractor_name": name})
    return row


def update_bill(db: Session, bill_number: str, *, contractor_name: Any = None, jobs: Any = None) -> Bill:
    """Only the contractor name and the job snapshot are editable; ledgers are not re-touched."""
    row = get_bill(db, bill_number)

    if contractor_name is not None:
        row.contractor_name = _validated_contractor_name(contractor_name)
    if jobs is not None:
        row.jobs = _validated_jobs(jobs)

    db.commit()
    db.refresh(row)
    return row


def mark_paid(db: Session, bill_number: str) -> Bill:
    row = get_bill(db, bill_number)
    row.payment_status = PAID
    row.payment_date = datetime.now(timezone.utc)
    db.commit()
    db.refresh(row)
    return row


# ---------- Deletion with reversal ----------

@dataclass(frozen=True)
class ReversalLine:
    job_number: str
    ops_name: str
    qty: float
    pending_status: str
    work_done_status: str
    pending_reason: Optional[str] = None
    work_done_reason: Optional[str] = None


@dataclass
class BillReversalResult:
    bill_number: str
    contractor_id: str
    lines: List[ReversalLine] = field(default_factory=list)

    @property
    def unmatched(self) -> List[ReversalLine]:
        return [l for l in self.lines if l.pending_status != "applied" or l.work_done_status != "applied"]


def _reverse_pending(
    db: Session,
    job_number: str,
    op_lines: List[dict],
    now: str,
) -> List[tuple]:
    """Add each line's qtyCompleted back to the matched ledger entry's pending quantity."""
    ledger = db.query(JobOpsLedger).filter(JobOpsLedger.job_id == job_number).first()
    if ledger is None:
        return [("skipped", "no ledger for job")] * len(op_lines)

    ops = [dict(e) for e in (ledger.ops or [])]
    catalog = catalog_service.lookup_operations(db, [e.get("opId") for e in ops])

    outcomes = []
    for op in op_lines:
        entry = find_ledger_entry(ops, op.get("opsName"), op.get("rate"), catalog)
        if entry is None:
            outcomes.append(("skipped", "no matching ledger entry"))
            continue
        qty = to_number(op.get("qtyCompleted")) or 0.0
        entry["pendingOpsQty"] = max(0.0, float(entry.get("pendingOpsQty") or 0) + qty)
        entry["lastUpdatedDate"] = now
        outcomes.append(("applied", None))

    ledger.ops = ops
    return outcomes


def _reverse_work_done(
    db: Session,
    contractor_id: str,
    job_number: str,
    op_lines: List[dict],
) -> List[tuple]:
    """Debit each line from the contractor's matched work-done entry; drop emptied entries and documents."""
    work_done = (
        db.query(ContractorWorkDone)
        .filter(
            ContractorWorkDone.contractor_id == contractor_id,
            ContractorWorkDone.job_id == job_number,
        )
        .first()
    )
    if work_done is None:
        return [("skipped", "no work-done record for contractor and job")] * len(op_lines)

    ops_done = [dict(od) for od in (work_done.ops_done or [])]

    outcomes = []
    for op in op_lines:
        entry = find_work_done_match(ops_done, op.get("opsName"), op.get("rate"))
        if entry is None:
            outcomes.append(("skipped", "no matching work-done entry"))
            continue
        qty = to_number(op.get("qtyCompleted")) or 0.0
        entry["opsDoneQty"] = max(0.0, float(entry.get("opsDoneQty") or 0) - qty)
        if entry["opsDoneQty"] <= 0:
            ops_done = [od for od in ops_done if od is not entry]
        outcomes.append(("applied", None))

    if ops_done:
        work_done.ops_done = ops_done
    else:
        db.delete(work_done)
        db.flush()
    return outcomes


def delete_bill(db: Session, bill_number: str) -> BillReversalResult:
    """
    Soft-delete a bill and reverse its quantities into both ledgers.

    Per job: pending quantities go back up on the job ledger, the contractor's
    work-done quantities go down. Lines with no matching entry are skipped and
    reported in the result. Everything commits in one transaction.
    """
    bill = get_bill(db, bill_number, include_deleted=False)
    contractor_id = resolve_contractor_id(db, bill.contractor_name)

    result = BillReversalResult(bill_number=bill.bill_number, contractor_id=contractor_id)
    now = datetime.now(timezone.utc).isoformat()

    try:
        for job in bill.jobs or []:
            job_number = str(job.get("jobNumber") or "").strip()
            op_lines = list(job.get("ops") or [])

            pending = _reverse_pending(db, job_number, op_lines, now)
            done = _reverse_work_done(db, contractor_id, job_number, op_lines)

            for op, (p_status, p_reason), (d_status, d_reason) in zip(op_lines, pending, done):
                line = ReversalLine(
                    job_number=job_number,
                    ops_name=str(op.get("opsName") or "").strip(),
                    qty=to_number(op.get("qtyCompleted")) or 0.0,
                    pending_status=p_status,
                    work_done_status=d_status,
                    pending_reason=p_reason,
                    work_done_reason=d_reason,
                )
                result.lines.append(line)
                if p_status != "applied" or d_status != "applied":
                    logger.warning(
                        "Bill line not fully reversed",
                        extra={
                            "bill_number": bill.bill_number,
                            "job_number": job_number,
                            "ops_name": line.ops_name,
                            "pending_reason": p_reason,
                            "work_done_reason": d_reason,
                        },
                    )

        bill.is_deleted = True
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Bill deleted",
        extra={
            "bill_number": bill.bill_number,
            "contractor_id": contractor_id,
            "lines": len(result.lines),
            "unmatched": len(result.unmatched),
        },
    )
    return result
