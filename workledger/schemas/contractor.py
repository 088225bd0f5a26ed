from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContractorWrite(BaseModel):
    name: Any = None


class ContractorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    contractorId: str = Field(validation_alias="contractor_id")
    name: str
    creationDate: datetime = Field(validation_alias="creation_date")
    isDeleted: bool = Field(validation_alias="is_deleted")
