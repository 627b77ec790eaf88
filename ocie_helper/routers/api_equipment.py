"""JSON listing and creation of equipment records."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.codes import normalize_record
from ..crud.equipment import insert_if_unique, list_all
from ..db.session import get_db
from ..deps.auth import require_site_access, require_write_access
from ..schemas.equipment import EquipmentCreate, EquipmentCreated, EquipmentOut

router = APIRouter(prefix="/equipment", tags=["equipment"])


@router.get("", response_model=list[EquipmentOut], dependencies=[Depends(require_site_access)])
def api_list(db: Session = Depends(get_db)):
    return list_all(db)


@router.post("", response_model=EquipmentCreated, dependencies=[Depends(require_write_access)])
def api_create(payload: EquipmentCreate, db: Session = Depends(get_db)):
    record = normalize_record(payload.model_dump(by_alias=True))
    item = insert_if_unique(db, record)
    return EquipmentCreated(item=EquipmentOut.model_validate(item))
