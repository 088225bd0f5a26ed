from typing import Any, List, Optional

from pydantic import BaseModel


class RecordWorkRequest(BaseModel):
    contractorId: Any = None
    jobNumber: Any = None
    # [{"opId", "opsName", "valuePerBook", "qtyToAdd"}]; validated per line
    operations: Any = None


class WorkLineResult(BaseModel):
    index: int
    status: str
    opId: Optional[str] = None
    reason: Optional[str] = None
    qty: Optional[float] = None
    pendingOpsQty: Optional[float] = None
    opsDoneQty: Optional[float] = None


class RecordWorkResponse(BaseModel):
    message: str
    contractorId: str
    jobNumber: str
    applied: int
    skipped: int
    lines: List[WorkLineResult]
