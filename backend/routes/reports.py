from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from aggregation import color_group_breakdown, monthly_stats, production_totals
from database import get_db
from dates import DateParseError
from export import clipboard_report, export_filename, production_csv, record_insight_csv, shift_csv
from filters import filter_records
from shift_simulation import simulate_shift_performance
from store import RecordStore

router = APIRouter(prefix="/api/reports", tags=["reports"])

INDUSTRY_PATTERN = "^(lantabur|taqwa)$"


def _filtered_production(db, search, start_date, end_date):
    records = RecordStore(db).list_production()
    try:
        return filter_records(records, search, start_date, end_date)
    except DateParseError as e:
        raise HTTPException(422, str(e))


def _production_or_404(db, record_id):
    record = RecordStore(db).get_production(record_id)
    if not record:
        raise HTTPException(404, "Production record not found")
    return record


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/totals")
def filtered_totals(
    industry: Optional[str] = Query(None, pattern=INDUSTRY_PATTERN),
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Summed totals and colour groups over the filtered records, for one unit or both."""
    records = _filtered_production(db, search, start_date, end_date)
    return production_totals(records, industry=industry)


@router.get("/monthly/{record_id}")
def record_month(
    record_id: str,
    industry: str = Query("lantabur", pattern=INDUSTRY_PATTERN),
    db: Session = Depends(get_db),
):
    record = _production_or_404(db, record_id)
    stats = monthly_stats(RecordStore(db).list_production(), record.date, industry)
    return {"date": record.date, "industry": industry, **stats}


@router.get("/breakdown/{record_id}")
def record_breakdown(
    record_id: str,
    industry: Optional[str] = Query(None, pattern=INDUSTRY_PATTERN),
    db: Session = Depends(get_db),
):
    return color_group_breakdown(_production_or_404(db, record_id), industry=industry)


@router.get("/clipboard/{record_id}", response_class=PlainTextResponse)
def record_clipboard(
    record_id: str,
    kind: str = Query("combined", pattern="^(lantabur|taqwa|combined)$"),
    db: Session = Depends(get_db),
):
    record = _production_or_404(db, record_id)
    return clipboard_report(record, RecordStore(db).list_production(), kind)


@router.get("/export.csv")
def export_production(
    industry: Optional[str] = Query(None, pattern=INDUSTRY_PATTERN),
    search: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    db: Session = Depends(get_db),
):
    records = _filtered_production(db, search, start_date, end_date)
    return _csv_response(production_csv(records, industry), export_filename(industry or "production"))


@router.get("/insight/{record_id}/csv")
def export_record_insight(
    record_id: str,
    industry: Optional[str] = Query(None, pattern=INDUSTRY_PATTERN),
    db: Session = Depends(get_db),
):
    record = _production_or_404(db, record_id)
    return _csv_response(record_insight_csv(record, industry), f"Production_Insight_{record.date}.csv")


@router.get("/shift-performance")
def shift_performance(search: Optional[str] = None, db: Session = Depends(get_db)):
    """Estimated (simulated) shift split of each day's production; not measured data."""
    return simulate_shift_performance(RecordStore(db).list_production(), search_text=search)


@router.get("/shift-performance.csv")
def export_shift_performance(search: Optional[str] = None, db: Session = Depends(get_db)):
    simulation = simulate_shift_performance(RecordStore(db).list_production(), search_text=search)
    return _csv_response(shift_csv(simulation), export_filename("shift_performance"))
