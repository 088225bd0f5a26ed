from typing import List

from fastapi import APIRouter, Depends

from workledger.database import SessionLocal
from workledger.deps.auth import require_auth
from workledger.schemas.job_ops import (
    AssignOperationsRequest,
    AssignOperationsResponse,
    JobDetailsResponse,
    JobLedgerResponse,
    JobSummaryResponse,
)
from workledger.services import job_ops_service
from workledger.services.job_metadata_source import JobMetadataSource, get_job_metadata_source

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("/ops", response_model=AssignOperationsResponse, status_code=201)
def assign_operations(payload: AssignOperationsRequest, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        result = job_ops_service.assign_operations(
            db,
            job_number=payload.jobNumber,
            qty=payload.qty,
            operations=payload.operations,
        )
        return AssignOperationsResponse(
            ledger=JobLedgerResponse.model_validate(result.ledger),
            created=result.created,
            merged=result.merged,
            skipped=result.skipped,
        )
    finally:
        db.close()


@router.get("/ops/job-numbers", response_model=List[str])
def list_job_numbers(_auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return job_ops_service.list_job_numbers(db)
    finally:
        db.close()


@router.get("/ops/{job_number}", response_model=JobLedgerResponse)
def get_job_ledger(job_number: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return job_ops_service.get_ledger(db, job_number)
    finally:
        db.close()


@router.get("/{job_number}/summary", response_model=JobSummaryResponse)
def get_job_summary(job_number: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return job_ops_service.job_summary(db, job_number)
    finally:
        db.close()


@router.get("/search-numbers/{job_number_part}", response_model=List[str])
def search_job_numbers(
    job_number_part: str,
    _auth: dict = Depends(require_auth),
    source: JobMetadataSource = Depends(get_job_metadata_source),
):
    return source.search_job_numbers(job_number_part)


@router.get("/details/{job_number}", response_model=JobDetailsResponse)
def get_job_details(
    job_number: str,
    _auth: dict = Depends(require_auth),
    source: JobMetadataSource = Depends(get_job_metadata_source),
):
    return source.get_job_details(job_number)
