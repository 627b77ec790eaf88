"""Equipment store gateway.

Plain functions over a SQLAlchemy ``Session``. Reads and writes that fail in
the driver are logged with the traceback, rolled back where a write was in
flight, and re-raised as :class:`StoreError` carrying a generic message; the
driver text never leaves this module.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.codes import NormalizedRecord
from ..core.errors import DuplicateError, StoreError
from ..models.equipment import Equipment

logger = logging.getLogger(__name__)

DUPLICATE_CODE = "Item with this NSN already exists"


def list_all(db: Session) -> list[Equipment]:
    """
    Return every equipment record in insertion order.
    """
    try:
        return list(db.execute(select(Equipment).order_by(Equipment.seq)).scalars().all())
    except SQLAlchemyError as exc:
        logger.exception("listing equipment failed")
        raise StoreError("Failed to read data", details="list_all failed") from exc


def find_by_code(db: Session, code: str) -> Equipment | None:
    """
    Fetch the first record carrying the given normalized partial NSN.
    """
    try:
        stmt = select(Equipment).where(Equipment.partial_code == code).limit(1)
        return db.execute(stmt).scalars().first()
    except SQLAlchemyError as exc:
        logger.exception("equipment lookup by code failed")
        raise StoreError("Failed to read data", details="find_by_code failed") from exc


def insert_if_unique(db: Session, record: NormalizedRecord) -> Equipment:
    """
    Persist ``record`` unless its partial NSN is already taken.

    The existence check and the insert are two separate statements. Two
    requests racing with the same code can both pass the check and both be
    written; data entry is manual and passcode gated, so that window is
    accepted instead of holding a lock.
    """
    if find_by_code(db, record.partial_code) is not None:
        raise DuplicateError(DUPLICATE_CODE)
    return insert(db, record)


def insert(db: Session, record: NormalizedRecord) -> Equipment:
    """
    Write ``record`` without any uniqueness check.
    """
    obj = Equipment(**record.model_dump())
    try:
        db.add(obj)
        db.commit()
        db.refresh(obj)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("inserting equipment failed")
        raise StoreError("Failed to add item", details="insert failed") from exc
    logger.info(
        "equipment.created",
        extra={"extra_data": {"equipment_id": obj.id, "partial_code": obj.partial_code}},
    )
    return obj
