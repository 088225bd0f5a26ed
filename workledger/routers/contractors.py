from typing import List

from fastapi import APIRouter, Depends

from workledger.database import SessionLocal
from workledger.deps.auth import require_auth
from workledger.schemas.contractor import ContractorResponse, ContractorWrite
from workledger.services import contractor_service

router = APIRouter(prefix="/contractors", tags=["Contractors"])


@router.get("", response_model=List[ContractorResponse])
def list_contractors(_auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return contractor_service.list_contractors(db)
    finally:
        db.close()


@router.post("", response_model=ContractorResponse, status_code=201)
def create_contractor(payload: ContractorWrite, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return contractor_service.create_contractor(db, payload.name)
    finally:
        db.close()


@router.put("/{row_id}", response_model=ContractorResponse)
def rename_contractor(row_id: int, payload: ContractorWrite, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return contractor_service.rename_contractor(db, row_id, payload.name)
    finally:
        db.close()


@router.delete("/{row_id}")
def delete_contractor(row_id: int, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        contractor_service.delete_contractor(db, row_id)
        return {"message": "Contractor deleted successfully"}
    finally:
        db.close()
