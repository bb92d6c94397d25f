from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from aggregation import refresh_rft_percentages, rft_insight
from database import get_db
from extraction import ExtractionError, build_rft_record, check_mime_type, extract_rft_data
from filters import filter_by_month, filter_records
from schemas import RFTBatchEntry, RFTDocumentUpload, RFTReportRecord, new_id, now_iso
from store import RecordStore, StoreError

router = APIRouter(prefix="/api/rft", tags=["rft"])


@router.get("")
def list_rft(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2099),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """RFT registries, newest first; month and year narrow to one calendar month."""
    records = RecordStore(db).list_rft()
    if month is not None and year is not None:
        return filter_by_month(records, month, year, search)
    return filter_records(records, search_text=search)


@router.get("/blank")
def blank_rft_record():
    """A fresh draft for the RFT editor, with one empty batch row."""
    draft = RFTReportRecord(
        id=new_id(),
        date=date.today().strftime("%d/%m/%Y"),
        entries=[RFTBatchEntry.blank()],
        created_at=now_iso(),
    )
    return refresh_rft_percentages(draft)


@router.get("/{record_id}")
def get_rft(record_id: str, db: Session = Depends(get_db)):
    record = RecordStore(db).get_rft(record_id)
    if not record:
        raise HTTPException(404, "RFT record not found")
    return record


@router.get("/{record_id}/insight")
def get_rft_insight(record_id: str, db: Session = Depends(get_db)):
    record = RecordStore(db).get_rft(record_id)
    if not record:
        raise HTTPException(404, "RFT record not found")
    return rft_insight(record)


@router.post("", status_code=201)
def save_rft(record: RFTReportRecord, db: Session = Depends(get_db)):
    """Create or replace (by id) an RFT registry; percentages are recomputed from entries."""
    try:
        return RecordStore(db).save_rft(record)
    except StoreError as e:
        raise HTTPException(500, str(e))


@router.delete("/{record_id}")
def delete_rft(record_id: str, db: Session = Depends(get_db)):
    try:
        deleted = RecordStore(db).delete_rft(record_id)
    except StoreError as e:
        raise HTTPException(500, str(e))
    if not deleted:
        raise HTTPException(404, "RFT record not found")
    return {"message": "Deleted", "id": record_id}


@router.post("/extract")
def extract_rft(upload: RFTDocumentUpload):
    """Read an RFT report into a draft. Nothing is saved until the draft is posted back."""
    try:
        check_mime_type(upload.mime_type)
    except ExtractionError as e:
        raise HTTPException(400, str(e))

    try:
        payload = extract_rft_data(upload.base64_data, upload.mime_type)
        return build_rft_record(payload, base=upload.draft)
    except ExtractionError as e:
        raise HTTPException(502, str(e))
