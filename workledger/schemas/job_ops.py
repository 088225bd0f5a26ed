from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AssignOperationsRequest(BaseModel):
    jobNumber: Any = None
    qty: Any = None
    # [{"operationId", "qtyPerBook", "ratePerBook"}]
    operations: Any = None


class LedgerEntry(BaseModel):
    opId: str
    opsName: Optional[str] = None
    qtyPerBook: float
    totalOpsQty: float
    pendingOpsQty: float
    valuePerBook: float
    creationDate: Optional[str] = None
    lastUpdatedDate: Optional[str] = None


class JobLedgerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    jobId: str = Field(validation_alias="job_id")
    totalQty: float = Field(validation_alias="total_qty")
    ops: List[LedgerEntry]
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class AssignOperationsResponse(BaseModel):
    ledger: JobLedgerResponse
    created: int
    merged: int
    skipped: List[Dict[str, Any]] = Field(default_factory=list)


class PendingOperation(BaseModel):
    opId: str
    opsName: str
    totalOpsQty: float
    pendingOpsQty: float
    qtyPerBook: float
    rate: float
    valuePerBook: float


class PendingOperationsResponse(BaseModel):
    jobNumber: str
    operations: List[PendingOperation]


class SummaryContractor(BaseModel):
    contractorId: str
    name: str


class SummaryOperation(BaseModel):
    opsId: str
    opsName: str
    totalOpsQty: float
    totalCompleted: float
    pending: float
    quantitiesByContractor: Dict[str, float]


class JobSummaryResponse(BaseModel):
    jobNumber: str
    contractors: List[SummaryContractor]
    operations: List[SummaryOperation]


class JobDetailsResponse(BaseModel):
    clientName: str
    jobTitle: str
    qty: float
    productCat: str
    unitPrice: float
