from typing import List, Optional

from fastapi import APIRouter, Depends

from workledger.core.authorization import Role, require_role
from workledger.database import SessionLocal
from workledger.deps.auth import require_auth
from workledger.schemas.operation import OperationResponse, OperationWrite
from workledger.services import catalog_service

router = APIRouter(prefix="/operations", tags=["Operations"])


@router.get("", response_model=List[OperationResponse])
def list_operations(search: Optional[str] = None, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return catalog_service.list_operations(db, search=search)
    finally:
        db.close()


@router.get("/{operation_id}", response_model=OperationResponse)
def get_operation(operation_id: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return catalog_service.get_operation(db, operation_id)
    finally:
        db.close()


@router.post("", response_model=OperationResponse, status_code=201)
def create_operation(payload: OperationWrite, _role=Depends(require_role(Role.ADMIN))):
    db = SessionLocal()
    try:
        return catalog_service.create_operation(
            db,
            ops_name=payload.opsName,
            conversion_type=payload.type,
            rate_per_unit=payload.ratePerUnit,
        )
    finally:
        db.close()


@router.put("/{operation_id}", response_model=OperationResponse)
def update_operation(operation_id: str, payload: OperationWrite, _role=Depends(require_role(Role.ADMIN))):
    db = SessionLocal()
    try:
        return catalog_service.update_operation(
            db,
            operation_id,
            ops_name=payload.opsName,
            conversion_type=payload.type,
            rate_per_unit=payload.ratePerUnit,
        )
    finally:
        db.close()


@router.delete("/{operation_id}")
def delete_operation(operation_id: str, _role=Depends(require_role(Role.ADMIN))):
    db = SessionLocal()
    try:
        catalog_service.delete_operation(db, operation_id)
        return {"message": "Operation deleted successfully"}
    finally:
        db.close()
