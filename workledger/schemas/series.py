from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SeriesWrite(BaseModel):
    jobNumbers: Any = None


class SeriesResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    jobNumbers: List[str] = Field(validation_alias="job_numbers")
    savedAt: datetime = Field(validation_alias="saved_at")


class SeriesSaveResponse(BaseModel):
    message: str
    created: bool
    series: SeriesResponse


class SeriesSearchResponse(BaseModel):
    found: bool
    seriesId: Optional[int]
    jobNumbers: List[str]
