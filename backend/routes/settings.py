from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from database import get_db
from schemas import AppSettings
from store import SettingsRepository, StoreError

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
def get_settings(db: Session = Depends(get_db)):
    return SettingsRepository(db).get()


@router.put("")
def update_settings(settings: AppSettings, db: Session = Depends(get_db)):
    try:
        return SettingsRepository(db).save(settings)
    except StoreError as e:
        raise HTTPException(500, str(e))
