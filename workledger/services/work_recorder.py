from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from workledger.core.errors import ValidationError
from workledger.models.contractor_work_done import ContractorWorkDone
from workledger.services.job_ops_service import get_ledger
from workledger.services.numbers import is_blank, to_number

logger = logging.getLogger(__name__)

APPLIED = "applied"
SKIPPED = "skipped"


@dataclass(frozen=True)
class LineOutcome:
    index: int
    status: str
    op_id: Optional[str] = None
    reason: Optional[str] = None
    qty: Optional[float] = None
    pending_ops_qty: Optional[float] = None
    ops_done_qty: Optional[float] = None


@dataclass
class WorkRecordResult:
    contractor_id: str
    job_number: str
    lines: List[LineOutcome] = field(default_factory=list)

    @property
    def applied(self) -> List[LineOutcome]:
        return [line for line in self.lines if line.status == APPLIED]

    @property
    def skipped(self) -> List[LineOutcome]:
        return [line for line in self.lines if line.status == SKIPPED]


def _invalid_reason(line: Any) -> Optional[str]:
    if not isinstance(line, dict):
        return "line is not an object"
    if is_blank(line.get("opId")):
        return "opId is required"
    if is_blank(line.get("opsName")):
        return "opsName is required"
    if to_number(line.get("valuePerBook")) is None:
        return "valuePerBook must be numeric"
    qty = to_number(line.get("qtyToAdd"))
    if qty is None:
        return "qtyToAdd must be numeric"
    if qty <= 0:
        return "qtyToAdd must be greater than 0"
    return None


def record_work(db: Session, *, contractor_id: Any, job_number: Any, operations: Any) -> WorkRecordResult:
    """
    Deduct claimed quantities from the job's pending operation quantities and
    credit them to the contractor's work-done entries.

    Lines are ``{"opId", "opsName", "valuePerBook", "qtyToAdd"}``. Invalid lines
    are skipped; a claim larger than the pending quantity is clamped at zero.
    The ledger update and the work-done update commit together.
    """
    if is_blank(contractor_id) or is_blank(job_number) or not isinstance(operations, list):
        raise ValidationError("Missing required fields: contractorId, jobNumber, and operations are required")

    contractor_id = str(contractor_id).strip()
    job_number = str(job_number).strip()
    ledger = get_ledger(db, job_number)

    result = WorkRecordResult(contractor_id=contractor_id, job_number=job_number)
    ops = [dict(e) for e in (ledger.ops or [])]
    credits: List[dict] = []
    now = datetime.now(timezone.utc).isoformat()

    for index, line in enumerate(operations):
        reason = _invalid_reason(line)
        if reason is not None:
            logger.warning("Skipping invalid work line", extra={"line_index": index, "reason": reason, "line": line})
            result.lines.append(LineOutcome(index=index, status=SKIPPED, reason=reason))
            continue

        op_id = str(line["opId"]).strip()
        # Exact identity inside one job document; no name/rate correlation here.
        entry = next((e for e in ops if str(e.get("opId")) == op_id), None)
        if entry is None:
            reason = "operation not found on job"
            logger.warning("Job operation not found", extra={"line_index": index, "op_id": op_id, "job_number": job_number})
            result.lines.append(LineOutcome(index=index, status=SKIPPED, op_id=op_id, reason=reason))
            continue

        qty = to_number(line["qtyToAdd"])
        entry["pendingOpsQty"] = max(0.0, float(entry.get("pendingOpsQty") or 0) - qty)
        entry["lastUpdatedDate"] = now

        # The ledger entry is authoritative for id and rate, not the caller.
        credits.append(
            {
                "index": index,
                "opsId": str(entry["opId"]).strip(),
                "opsName": str(line["opsName"]).strip(),
                "valuePerBook": float(entry.get("valuePerBook") or 0),
                "opsDoneQty": qty,
                "completionDate": now,
            }
        )
        result.lines.append(
            LineOutcome(index=index, status=APPLIED, op_id=op_id, qty=qty, pending_ops_qty=entry["pendingOpsQty"])
        )

    if not credits:
        raise ValidationError("No valid operations to update")

    try:
        ledger.ops = ops

        work_done = (
            db.query(ContractorWorkDone)
            .filter(
                ContractorWorkDone.contractor_id == contractor_id,
                ContractorWorkDone.job_id == job_number,
            )
            .first()
        )
        if work_done is None:
            work_done = ContractorWorkDone(contractor_id=contractor_id, job_id=job_number, ops_done=[])
            db.add(work_done)
            ops_done: List[dict] = []
        else:
            ops_done = [dict(od) for od in (work_done.ops_done or [])]

        done_by_index = {}
        for credit in credits:
            index = credit.pop("index")
            existing = next((od for od in ops_done if str(od.get("opsId")) == credit["opsId"]), None)
            if existing is not None:
                existing["opsDoneQty"] = float(existing.get("opsDoneQty") or 0) + credit["opsDoneQty"]
                existing["completionDate"] = credit["completionDate"]
                done_by_index[index] = existing["opsDoneQty"]
            else:
                ops_done.append(credit)
                done_by_index[index] = credit["opsDoneQty"]

        work_done.ops_done = ops_done
        db.commit()
    except Exception:
        db.rollback()
        raise

    result.lines = [
        LineOutcome(
            index=line.index,
            status=line.status,
            op_id=line.op_id,
            reason=line.reason,
            qty=line.qty,
            pending_ops_qty=line.pending_ops_qty,
            ops_done_qty=done_by_index.get(line.index),
        )
        if line.status == APPLIED
        else line
        for line in result.lines
    ]

    logger.info(
        "Work recorded",
        extra={
            "contractor_id": contractor_id,
            "job_number": job_number,
            "applied": len(result.applied),
            "skipped": len(result.skipped),
        },
    )
    return result
