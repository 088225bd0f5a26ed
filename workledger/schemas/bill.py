from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BillWrite(BaseModel):
    contractorName: Any = None
    # [{"jobNumber", "clientName", "jobTitle",
    #   "ops": [{"opsName", "qtyBook", "rate", "qtyCompleted", "totalValue"}]}]
    jobs: Any = None


class BillOperation(BaseModel):
    opsName: str
    qtyBook: float
    rate: float
    qtyCompleted: float
    totalValue: float


class BillJob(BaseModel):
    jobNumber: str
    clientName: str = ""
    jobTitle: str = ""
    ops: List[BillOperation]


class BillResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    billNumber: str = Field(validation_alias="bill_number")
    contractorName: str = Field(validation_alias="contractor_name")
    paymentStatus: str = Field(validation_alias="payment_status")
    paymentDate: Optional[datetime] = Field(validation_alias="payment_date")
    jobs: List[BillJob]
    isDeleted: bool = Field(validation_alias="is_deleted")
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")


class ReversalLineResult(BaseModel):
    jobNumber: str
    opsName: str
    qty: float
    pendingStatus: str
    workDoneStatus: str
    pendingReason: Optional[str] = None
    workDoneReason: Optional[str] = None


class BillDeleteResponse(BaseModel):
    message: str
    billNumber: str
    lines: List[ReversalLineResult]
    unmatched: int
