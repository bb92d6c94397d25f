import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from database import get_db
from dates import DateParseError
from extraction import ExtractionError, build_production_record, check_mime_type, extract_production_data
from filters import filter_records
from schemas import DocumentUpload, ProductionRecordIn
from store import RecordStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/production", tags=["production"])


@router.get("")
def list_production(
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    order: str = Query("desc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
):
    records = RecordStore(db).list_production()
    try:
        return filter_records(records, search, start_date, end_date, newest_first=(order == "desc"))
    except DateParseError as e:
        raise HTTPException(422, str(e))


@router.get("/{record_id}")
def get_production(record_id: str, db: Session = Depends(get_db)):
    record = RecordStore(db).get_production(record_id)
    if not record:
        raise HTTPException(404, "Production record not found")
    return record


@router.post("", status_code=201)
def create_production(entry: ProductionRecordIn, replace_id: Optional[str] = None, db: Session = Depends(get_db)):
    """Manual entry. A record already stored for the same date is replaced, keeping its id."""
    try:
        return RecordStore(db).save_production(entry.to_record(), replace_id=replace_id)
    except StoreError as e:
        raise HTTPException(500, str(e))


@router.put("/{record_id}")
def update_production(record_id: str, entry: ProductionRecordIn, db: Session = Depends(get_db)):
    store = RecordStore(db)
    if not store.get_production(record_id):
        raise HTTPException(404, "Production record not found")
    try:
        return store.save_production(entry.to_record(record_id), replace_id=record_id)
    except StoreError as e:
        raise HTTPException(500, str(e))


@router.delete("/{record_id}")
def delete_production(record_id: str, db: Session = Depends(get_db)):
    try:
        deleted = RecordStore(db).delete_production(record_id)
    except StoreError as e:
        raise HTTPException(500, str(e))
    if not deleted:
        raise HTTPException(404, "Production record not found")
    return {"message": "Deleted", "id": record_id}


@router.post("/upload", status_code=201)
def upload_production_report(upload: DocumentUpload, db: Session = Depends(get_db)):
    """Extract a daily production report from an image/PDF and save it.

    With replace_id the extracted figures overwrite that record instead.
    """
    try:
        check_mime_type(upload.mime_type)
    except ExtractionError as e:
        raise HTTPException(400, str(e))

    store = RecordStore(db)
    if upload.replace_id and not store.get_production(upload.replace_id):
        raise HTTPException(404, "Production record not found")

    try:
        payload = extract_production_data(upload.base64_data, upload.mime_type)
        record = build_production_record(payload, record_id=upload.replace_id)
    except ExtractionError as e:
        raise HTTPException(502, str(e))

    try:
        saved = store.save_production(record, replace_id=upload.replace_id)
    except StoreError as e:
        raise HTTPException(500, str(e))

    return {
        "message": "Record updated successfully!" if upload.replace_id else "Data extracted and saved!",
        "record": saved,
    }
