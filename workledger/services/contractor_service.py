import random
import string
import time
from typing import Any, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workledger.core.errors import ConflictError, NotFoundError, ValidationError
from workledger.models.contractor import Contractor
from workledger.services.numbers import is_blank

_ID_ALPHABET = string.ascii_uppercase + string.digits


def _generate_contractor_id() -> str:
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"CTR{int(time.time() * 1000)}{suffix}"


def list_contractors(db: Session) -> List[Contractor]:
    return (
        db.query(Contractor)
        .filter(Contractor.is_deleted.is_(False))
        .order_by(Contractor.creation_date.desc(), Contractor.id.desc())
        .all()
    )


def get_contractor(db: Session, row_id: int) -> Contractor:
    row = db.query(Contractor).filter(Contractor.id == int(row_id)).first()
    if row is None:
        raise NotFoundError("Contractor not found")
    return row


def create_contractor(db: Session, name: Any) -> Contractor:
    if is_blank(name):
        raise ValidationError("Contractor name is required")

    contractor_id = _generate_contractor_id()
    while db.query(Contractor).filter(Contractor.contractor_id == contractor_id).first() is not None:
        contractor_id = _generate_contractor_id()

    row = Contractor(contractor_id=contractor_id, name=str(name).strip(), is_deleted=False)
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Contractor ID already exists") from exc
    db.refresh(row)
    return row


def rename_contractor(db: Session, row_id: int, name: Any) -> Contractor:
    if is_blank(name):
        raise ValidationError("Contractor name is required")

    row = get_contractor(db, row_id)
    row.name = str(name).strip()
    db.commit()
    db.refresh(row)
    return row


def delete_contractor(db: Session, row_id: int) -> Contractor:
    row = get_contractor(db, row_id)
    row.is_deleted = True
    db.commit()
    return row


def resolve_contractor_id(db: Session, name: Any) -> str:
    """Display name -> stable contractor identity. Active contractors win over soft-deleted ones."""
    if is_blank(name):
        raise NotFoundError("Contractor not found for name: ''")

    trimmed = str(name).strip()
    row = (
        db.query(Contractor)
        .filter(Contractor.name == trimmed)
        .order_by(Contractor.is_deleted.asc(), Contractor.id.asc())
        .first()
    )
    if row is None:
        raise NotFoundError(f"Contractor not found for name: {trimmed}")
    return row.contractor_id


def contractor_names(db: Session, contractor_ids: List[str]) -> dict:
    if not contractor_ids:
        return {}
    rows = db.query(Contractor).filter(Contractor.contractor_id.in_(contractor_ids)).all()
    return {r.contractor_id: r.name for r in rows}
