from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OperationWrite(BaseModel):
    opsName: Any = None
    type: Any = None
    ratePerUnit: Any = None


class OperationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    opsName: str = Field(validation_alias="ops_name")
    type: str = Field(validation_alias="conversion_type")
    ratePerUnit: float = Field(validation_alias="rate_per_unit")
    isDeleted: bool = Field(validation_alias="is_deleted")
    createdAt: datetime = Field(validation_alias="created_at")
    updatedAt: datetime = Field(validation_alias="updated_at")
