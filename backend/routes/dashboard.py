from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from aggregation import dashboard_summary, production_trend, rft_summary
from database import get_db
from store import RecordStore

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/summary")
def summary(db: Session = Depends(get_db)):
    """Headline production KPIs anchored on the latest report; null when nothing is stored."""
    return dashboard_summary(RecordStore(db).list_production())


@router.get("/trend")
def trend(limit: int = Query(30, ge=1, le=366), db: Session = Depends(get_db)):
    """Oldest-first per-unit totals of the most recent reports, for the trend charts."""
    return production_trend(RecordStore(db).list_production(), limit=limit)


@router.get("/rft-summary")
def quality_summary(db: Session = Depends(get_db)):
    """Today / month / year / lifetime RFT averages, anchored on the latest registry."""
    return rft_summary(RecordStore(db).list_rft())
