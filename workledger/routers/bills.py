from typing import List

from fastapi import APIRouter, Depends

from workledger.core.authorization import Role, require_role
from workledger.database import SessionLocal
from workledger.deps.auth import require_auth
from workledger.schemas.bill import BillDeleteResponse, BillResponse, BillWrite, ReversalLineResult
from workledger.services import billing_service

router = APIRouter(prefix="/bills", tags=["Bills"])


@router.get("", response_model=List[BillResponse])
def list_bills(_auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return billing_service.list_bills(db)
    finally:
        db.close()


@router.get("/{bill_number}", response_model=BillResponse)
def get_bill(bill_number: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return billing_service.get_bill(db, bill_number)
    finally:
        db.close()


@router.post("", response_model=BillResponse, status_code=201)
def create_bill(payload: BillWrite, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return billing_service.create_bill(db, contractor_name=payload.contractorName, jobs=payload.jobs)
    finally:
        db.close()


@router.put("/{bill_number}", response_model=BillResponse)
def update_bill(bill_number: str, payload: BillWrite, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return billing_service.update_bill(
            db,
            bill_number,
            contractor_name=payload.contractorName,
            jobs=payload.jobs,
        )
    finally:
        db.close()


@router.patch("/{bill_number}/pay", response_model=BillResponse)
def mark_bill_paid(bill_number: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return billing_service.mark_paid(db, bill_number)
    finally:
        db.close()


@router.delete("/{bill_number}", response_model=BillDeleteResponse)
def delete_bill(bill_number: str, _role=Depends(require_role(Role.ADMIN))):
    db = SessionLocal()
    try:
        result = billing_service.delete_bill(db, bill_number)
        return BillDeleteResponse(
            message="Bill deleted successfully",
            billNumber=result.bill_number,
            unmatched=len(result.unmatched),
            lines=[
                ReversalLineResult(
                    jobNumber=line.job_number,
                    opsName=line.ops_name,
                    qty=line.qty,
                    pendingStatus=line.pending_status,
                    workDoneStatus=line.work_done_status,
                    pendingReason=line.pending_reason,
                    workDoneReason=line.work_done_reason,
                )
                for line in result.lines
            ],
        )
    finally:
        db.close()
