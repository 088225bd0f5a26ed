from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from workledger.database import SessionLocal
from workledger.deps.auth import require_auth
from workledger.schemas.series import SeriesResponse, SeriesSaveResponse, SeriesSearchResponse, SeriesWrite
from workledger.services import series_service

router = APIRouter(prefix="/series", tags=["Series"])


@router.post("", response_model=SeriesSaveResponse)
def save_series(payload: SeriesWrite, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        row, created = series_service.save_series(db, payload.jobNumbers)
        body = SeriesSaveResponse(
            message="Series saved successfully" if created else "Series already exists",
            created=created,
            series=SeriesResponse.model_validate(row),
        )
        return JSONResponse(status_code=201 if created else 200, content=body.model_dump(mode="json"))
    finally:
        db.close()


@router.get("", response_model=List[SeriesResponse])
def list_series(_auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return series_service.list_series(db)
    finally:
        db.close()


@router.get("/search/{job_number}", response_model=SeriesSearchResponse)
def search_series(job_number: str, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        row = series_service.find_series_containing(db, job_number)
        if row is None:
            return SeriesSearchResponse(found=False, seriesId=None, jobNumbers=[])
        return SeriesSearchResponse(found=True, seriesId=row.id, jobNumbers=row.job_numbers or [])
    finally:
        db.close()


@router.get("/{series_id}", response_model=SeriesResponse)
def get_series(series_id: int, _auth: dict = Depends(require_auth)):
    db = SessionLocal()
    try:
        return series_service.get_series(db, series_id)
    finally:
        db.close()
