from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from workledger.core.errors import ConflictError, NotFoundError, ValidationError
from workledger.models.operation import CONVERSION_TYPES, Operation
from workledger.services.numbers import is_blank, to_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    conversion_type: str
    rate_per_unit: float


def _validated_fields(ops_name: Any, conversion_type: Any, rate_per_unit: Any) -> tuple[str, str, float]:
    if is_blank(ops_name) or is_blank(conversion_type) or is_blank(rate_per_unit):
        raise ValidationError("Operation name, type, and rate/unit are required")

    conversion_type = str(conversion_type).strip()
    if conversion_type not in CONVERSION_TYPES:
        raise ValidationError(f"Type must be one of: {', '.join(CONVERSION_TYPES)}")

    rate = to_number(rate_per_unit)
    if rate is None or rate < 0:
        raise ValidationError("Rate/unit must be a valid number greater than or equal to 0")

    return str(ops_name).strip(), conversion_type, round(rate, 4)


def list_operations(db: Session, search: Optional[str] = None) -> List[Operation]:
    q = db.query(Operation).filter(Operation.is_deleted.is_(False))
    if search:
        q = q.filter(func.lower(Operation.ops_name).contains(search.strip().lower(), autoescape=True))
    return q.order_by(Operation.ops_name.asc()).all()


def get_operation(db: Session, operation_id: str) -> Operation:
    row = db.query(Operation).filter(Operation.id == str(operation_id)).first()
    if row is None:
        raise NotFoundError("Operation not found")
    return row


def _active_name_taken(db: Session, ops_name: str, exclude_id: Optional[str] = None) -> bool:
    q = db.query(Operation).filter(
        Operation.ops_name == ops_name,
        Operation.is_deleted.is_(False),
    )
    if exclude_id is not None:
        q = q.filter(Operation.id != exclude_id)
    return q.first() is not None


def create_operation(db: Session, *, ops_name: Any, conversion_type: Any, rate_per_unit: Any) -> Operation:
    name, conversion_type, rate = _validated_fields(ops_name, conversion_type, rate_per_unit)

    if _active_name_taken(db, name):
        raise ConflictError("Operation already exists")

    row = Operation(ops_name=name, conversion_type=conversion_type, rate_per_unit=rate, is_deleted=False)
    db.add(row)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Operation already exists") from exc
    db.refresh(row)

    logger.info(
        "Operation created",
        extra={"operation_id": row.id, "ops_name": name, "conversion_type": conversion_type},
    )
    return row


def update_operation(
    db: Session,
    operation_id: str,
    *,
    ops_name: Any,
    conversion_type: Any,
    rate_per_unit: Any,
) -> Operation:
    name, conversion_type, rate = _validated_fields(ops_name, conversion_type, rate_per_unit)
    row = get_operation(db, operation_id)

    if _active_name_taken(db, name, exclude_id=row.id):
        raise ConflictError("Operation already exists")

    row.ops_name = name
    row.conversion_type = conversion_type
    row.rate_per_unit = rate
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Operation already exists") from exc
    db.refresh(row)
    return row


def delete_operation(db: Session, operation_id: str) -> Operation:
    row = get_operation(db, operation_id)
    row.is_deleted = True
    db.commit()
    return row


def lookup_operations(db: Session, operation_ids: Iterable[Any]) -> Dict[str, CatalogEntry]:
    """Catalog lookup ``{id -> CatalogEntry}``. Unknown ids are absent; soft-deleted entries are included."""
    ids = sorted({str(i).strip() for i in operation_ids if not is_blank(i)})
    if not ids:
        return {}

    rows = db.query(Operation).filter(Operation.id.in_(ids)).all()
    return {
        r.id: CatalogEntry(
            name=r.ops_name,
            conversion_type=r.conversion_type,
            rate_per_unit=float(r.rate_per_unit or 0),
        )
        for r in rows
    }
