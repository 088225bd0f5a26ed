from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from workledger.core.errors import NotFoundError, ValidationError
from workledger.models.contractor_work_done import ContractorWorkDone
from workledger.models.job_ops_ledger import JobOpsLedger
from workledger.services import catalog_service, contractor_service
from workledger.services.numbers import is_blank, to_number
from workledger.services.operation_matcher import find_match, operation_key

logger = logging.getLogger(__name__)

UNKNOWN_OPERATION = "Unknown"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def seed_total_ops_qty(conversion_type: Optional[str], qty_per_book: float, total_qty: float) -> float:
    """
    Required operation quantity for a job of ``total_qty`` units.

      1:1, 1*x  -> qty_per_book * total_qty
      1/x       -> total_qty / qty_per_book   (0 when qty_per_book is 0)

    An unknown conversion type is treated as a multiply.
    """
    if conversion_type == "1/x":
        return total_qty / qty_per_book if qty_per_book > 0 else 0.0
    return qty_per_book * total_qty


def entry_name(entry: dict, catalog: Dict[str, catalog_service.CatalogEntry]) -> str:
    """Catalog's current name for the entry's opId, else the name snapshot stored on the entry."""
    found = catalog.get(str(entry.get("opId")))
    if found is not None:
        return found.name
    if not is_blank(entry.get("opsName")):
        return str(entry["opsName"]).strip()
    return UNKNOWN_OPERATION


def find_ledger_entry(
    ops: List[dict],
    name: Any,
    rate: Any,
    catalog: Dict[str, catalog_service.CatalogEntry],
) -> Optional[dict]:
    return find_match(
        ops,
        name,
        rate,
        name_of=lambda e: entry_name(e, catalog),
        rate_of=lambda e: e.get("valuePerBook"),
    )


def get_ledger(db: Session, job_number: str) -> JobOpsLedger:
    row = db.query(JobOpsLedger).filter(JobOpsLedger.job_id == str(job_number).strip()).first()
    if row is None:
        raise NotFoundError("Job not found in JobOpsMaster")
    return row


def list_job_numbers(db: Session) -> List[str]:
    rows = db.query(JobOpsLedger.job_id).order_by(JobOpsLedger.job_id.asc()).all()
    return [r.job_id for r in rows]


@dataclass
class SeedResult:
    ledger: JobOpsLedger
    created: int = 0
    merged: int = 0
    skipped: List[dict] = field(default_factory=list)


def assign_operations(db: Session, *, job_number: Any, qty: Any, operations: Any) -> SeedResult:
    """
    Seed (or accumulate into) the job's operation ledger.

    Each line is ``{"operationId", "qtyPerBook", "ratePerBook"}``. A line whose
    operation already has an entry (same name and rounded value per book)
    adds to that entry's total and pending quantities.
    """
    if is_blank(job_number) or not isinstance(operations, list) or not operations:
        raise ValidationError("Job number and at least one operation are required")

    job_number = str(job_number).strip()
    total_qty = to_number(qty)
    if total_qty is None:
        total_qty = 0.0
    if total_qty < 0:
        raise ValidationError("Job quantity must be non-negative")

    catalog = catalog_service.lookup_operations(db, [op.get("operationId") for op in operations if isinstance(op, dict)])

    seeded: List[dict] = []
    skipped: List[dict] = []
    for index, op in enumerate(operations):
        if not isinstance(op, dict) or is_blank(op.get("operationId")):
            skipped.append({"index": index, "reason": "missing operationId"})
            continue

        qty_per_book = to_number(op.get("qtyPerBook"))
        value_per_book = to_number(op.get("ratePerBook"))
        if qty_per_book is None or qty_per_book < 0 or value_per_book is None or value_per_book < 0:
            skipped.append({"index": index, "reason": "qtyPerBook and ratePerBook must be non-negative numbers"})
            continue

        op_id = str(op["operationId"]).strip()
        found = catalog.get(op_id)
        conversion_type = found.conversion_type if found is not None else None
        if found is None:
            logger.warning(
                "Operation type not found, seeding with multiplication",
                extra={"job_number": job_number, "op_id": op_id},
            )

        total_ops_qty = seed_total_ops_qty(conversion_type, qty_per_book, total_qty)
        logger.info(
            "Seeding job operation",
            extra={
                "job_number": job_number,
                "op_id": op_id,
                "conversion_type": conversion_type,
                "qty_per_book": qty_per_book,
                "total_qty": total_qty,
                "total_ops_qty": total_ops_qty,
            },
        )

        now = _now_iso()
        seeded.append(
            {
                "opId": op_id,
                "opsName": found.name if found is not None else UNKNOWN_OPERATION,
                "qtyPerBook": qty_per_book,
                "totalOpsQty": total_ops_qty,
                "pendingOpsQty": total_ops_qty,
                "valuePerBook": value_per_book,
                "creationDate": now,
                "lastUpdatedDate": now,
            }
        )

    if not seeded:
        raise ValidationError("No valid operations to save", context={"skipped": skipped})

    ledger = db.query(JobOpsLedger).filter(JobOpsLedger.job_id == job_number).first()
    result_created = 0
    result_merged = 0

    if ledger is None:
        ledger = JobOpsLedger(job_id=job_number, total_qty=total_qty, ops=[])
        db.add(ledger)
        existing: List[dict] = []
    else:
        existing = [dict(e) for e in (ledger.ops or [])]
        catalog.update(
            catalog_service.lookup_operations(
                db, [e.get("opId") for e in existing if e.get("opId") not in catalog]
            )
        )

    for new_entry in seeded:
        match = find_ledger_entry(existing, new_entry["opsName"], new_entry["valuePerBook"], catalog)
        if match is not None:
            match["totalOpsQty"] = float(match.get("totalOpsQty") or 0) + new_entry["totalOpsQty"]
            match["pendingOpsQty"] = float(match.get("pendingOpsQty") or 0) + new_entry["pendingOpsQty"]
            match["opsName"] = new_entry["opsName"]
            match["lastUpdatedDate"] = new_entry["lastUpdatedDate"]
            result_merged += 1
        else:
            existing.append(new_entry)
            result_created += 1

    # The latest declared job quantity wins.
    ledger.total_qty = total_qty
    ledger.ops = existing

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(ledger)

    return SeedResult(ledger=ledger, created=result_created, merged=result_merged, skipped=skipped)


def pending_operations(db: Session, job_number: str) -> dict:
    ledger = get_ledger(db, job_number)
    pending = [e for e in (ledger.ops or []) if float(e.get("pendingOpsQty") or 0) > 0]
    catalog = catalog_service.lookup_operations(db, [e.get("opId") for e in pending])

    operations = []
    for e in pending:
        found = catalog.get(str(e.get("opId")))
        operations.append(
            {
                "opId": e.get("opId"),
                "opsName": entry_name(e, catalog),
                "totalOpsQty": e.get("totalOpsQty"),
                "pendingOpsQty": e.get("pendingOpsQty"),
                "qtyPerBook": e.get("qtyPerBook"),
                "rate": found.rate_per_unit if found is not None else 0,
                "valuePerBook": e.get("valuePerBook") or 0,
            }
        )

    return {"jobNumber": ledger.job_id, "operations": operations}


def job_summary(db: Session, job_number: str) -> dict:
    """
    Previous-operations summary for a job: per ledger entry, the total
    completed quantity across contractors and the per-contractor split,
    correlated with work-done entries by operation key.
    """
    ledger = get_ledger(db, job_number)
    ops = ledger.ops or []
    op_ids = {str(e.get("opId")) for e in ops}
    catalog = catalog_service.lookup_operations(db, op_ids)

    docs = db.query(ContractorWorkDone).filter(ContractorWorkDone.job_id == ledger.job_id).all()
    contractor_ids: List[str] = []
    for doc in docs:
        if doc.contractor_id not in contractor_ids:
            contractor_ids.append(doc.contractor_id)
    names = contractor_service.contractor_names(db, contractor_ids)

    by_key_and_contractor: Dict[tuple, Dict[str, float]] = {}
    completed_by_key: Dict[tuple, float] = {}
    for doc in docs:
        for od in doc.ops_done or []:
            if is_blank(od.get("opsId")) or is_blank(od.get("opsName")):
                continue
            if od.get("opsDoneQty") is None or od.get("valuePerBook") is None:
                continue
            # Only work recorded against this job's own ledger entries counts.
            if str(od["opsId"]) not in op_ids:
                continue

            key = operation_key(od["opsName"], od["valuePerBook"])
            done = float(od["opsDoneQty"])
            per_contractor = by_key_and_contractor.setdefault(key, {})
            per_contractor[doc.contractor_id] = per_contractor.get(doc.contractor_id, 0.0) + done
            completed_by_key[key] = completed_by_key.get(key, 0.0) + done

    operations = []
    for e in ops:
        name = entry_name(e, catalog)
        key = operation_key(name, e.get("valuePerBook") or 0)
        total = float(e.get("totalOpsQty") or 0)
        completed = completed_by_key.get(key, 0.0)
        operations.append(
            {
                "opsId": e.get("opId"),
                "opsName": name,
                "totalOpsQty": total,
                "totalCompleted": completed,
                "pending": max(0.0, total - completed),
                "quantitiesByContractor": by_key_and_contractor.get(key, {}),
            }
        )

    return {
        "jobNumber": ledger.job_id,
        "contractors": [{"contractorId": cid, "name": names.get(cid, cid)} for cid in contractor_ids],
        "operations": operations,
    }
