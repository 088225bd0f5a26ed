from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from workledger.core.errors import NotFoundError, ValidationError
from workledger.models.series import Series


def _clean_job_numbers(job_numbers: Any) -> List[str]:
    if not isinstance(job_numbers, list) or not job_numbers:
        raise ValidationError("Job numbers array is required and must not be empty")

    cleaned = sorted(jn.strip() for jn in job_numbers if isinstance(jn, str) and jn.strip())
    if not cleaned:
        raise ValidationError("At least one valid job number is required")
    return cleaned


def save_series(db: Session, job_numbers: Any) -> Tuple[Series, bool]:
    """Returns (series, created). An existing series with the same job numbers in any order is reused."""
    cleaned = _clean_job_numbers(job_numbers)

    same_size = db.query(Series).filter(Series.job_count == len(cleaned)).all()
    for existing in same_size:
        if sorted(existing.job_numbers or []) == cleaned:
            return existing, False

    row = Series(job_numbers=cleaned, job_count=len(cleaned))
    db.add(row)
    db.commit()
    db.refresh(row)
    return row, True


def list_series(db: Session) -> List[Series]:
    return db.query(Series).order_by(Series.saved_at.desc(), Series.id.desc()).all()


def find_series_containing(db: Session, job_number: str) -> Optional[Series]:
    """Most recently saved series whose job numbers include ``job_number``."""
    wanted = str(job_number).strip()
    if not wanted:
        raise ValidationError("Job number is required")

    for row in list_series(db):
        if wanted in (row.job_numbers or []):
            return row
    return None


def get_series(db: Session, series_id: int) -> Series:
    row = db.query(Series).filter(Series.id == int(series_id)).first()
    if row is None:
        raise NotFoundError("Series not found")
    return row
