from fastapi import APIRouter, Depends

from workledger.database import SessionLocal
from workledger.deps.auth import require_auth
from workledger.schemas.job_ops import PendingOperationsResponse
from workledger.schemas.work import RecordWorkRequest, RecordWorkResponse, WorkLineResult
from workledger.services import job_ops_service, work_recorder

router = APIRouter(prefix="/work", tags=["Work"])


@router.get("/pending/{job_number}", response_model=PendingOperationsResponse)
def get_pending_operations(job_number: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return job_ops_service.pending_operations(db, job_number)
    finally:
        db.close()


@router.post("/record", response_model=RecordWorkResponse)
def record_work(payload: RecordWorkRequest, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        result = work_recorder.record_work(
            db,
            contractor_id=payload.contractorId,
            job_number=payload.jobNumber,
            operations=payload.operations,
        )
        return RecordWorkResponse(
            message="Work updated successfully",
            contractorId=result.contractor_id,
            jobNumber=result.job_number,
            applied=len(result.applied),
            skipped=len(result.skipped),
            lines=[
                WorkLineResult(
                    index=line.index,
                    status=line.status,
                    opId=line.op_id,
                    reason=line.reason,
                    qty=line.qty,
                    pendingOpsQty=line.pending_ops_qty,
                    opsDoneQty=line.ops_done_qty,
                )
                for line in result.lines
            ],
        )
    finally:
        db.close()
