"""Record storage for production and RFT reports.

Records are kept whole as JSON (camelCase, the same shape the dashboard and the
extraction payloads use) next to a few indexed columns. Writers notify
in-process subscribers with the full current snapshot of the collection.
"""

import logging
from collections import defaultdict
from typing import Callable, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aggregation import refresh_rft_percentages
from filters import sort_by_date
from models import AppSettingRow, ProductionRecordRow, RFTReportRow
from schemas import AppSettings, ProductionRecord, RFTReportRecord, new_id

logger = logging.getLogger(__name__)

PRODUCTION = "production_records"
RFT = "rft_records"


class StoreError(Exception):
    """A write could not be committed; the session has been rolled back."""


class SubscriptionHub:
    def __init__(self):
        self._listeners = defaultdict(list)

    def subscribe(self, collection: str, callback: Callable[[list], None]) -> Callable[[], None]:
        if collection not in (PRODUCTION, RFT):
            raise ValueError(f"Unknown collection: {collection}")
        self._listeners[collection].append(callback)

        def unsubscribe():
            if callback in self._listeners[collection]:
                self._listeners[collection].remove(callback)

        return unsubscribe

    def publish(self, collection: str, snapshot: list) -> None:
        for callback in list(self._listeners[collection]):
            try:
                callback(snapshot)
            except Exception:
                logger.exception("Subscriber of %s failed", collection)

    def has_listeners(self, collection: str) -> bool:
        return bool(self._listeners[collection])


hub = SubscriptionHub()


class RecordStore:
    def __init__(self, db: Session, subscriptions: SubscriptionHub = None):
        self.db = db
        self.subscriptions = subscriptions or hub

    # ---- reads ----

    def list_production(self) -> List[ProductionRecord]:
        rows = self.db.query(ProductionRecordRow).all()
        return sort_by_date([_production_from_row(r) for r in rows], newest_first=False)

    def list_rft(self) -> List[RFTReportRecord]:
        rows = self.db.query(RFTReportRow).all()
        return sort_by_date([_rft_from_row(r) for r in rows], newest_first=False)

    def get_production(self, record_id: str) -> Optional[ProductionRecord]:
        row = self.db.get(ProductionRecordRow, record_id)
        return _production_from_row(row) if row else None

    def get_rft(self, record_id: str) -> Optional[RFTReportRecord]:
        row = self.db.get(RFTReportRow, record_id)
        return _rft_from_row(row) if row else None

    def subscribe(self, collection: str, callback: Callable[[list], None]) -> Callable[[], None]:
        return self.subscriptions.subscribe(collection, callback)

    # ---- writes ----

    def save_production(self, record: ProductionRecord, replace_id: str = None) -> ProductionRecord:
        """Upsert a production record, one record per report date.

        The id kept is, in order: replace_id, the id of a record already
        stored for the same date text, the record's own id.
        """
        same_date = (
            self.db.query(ProductionRecordRow)
            .filter(ProductionRecordRow.date == record.date)
            .first()
        )
        final_id = replace_id or (same_date.id if same_date else None) or record.id or new_id()

        row = self.db.get(ProductionRecordRow, final_id)
        created_at = row.created_at if row else record.created_at
        record = record.model_copy(update={"id": final_id, "created_at": created_at})

        if row is None:
            row = ProductionRecordRow(id=final_id, created_at=created_at)
            self.db.add(row)
        row.date = record.date
        row.total_production = record.total_production
        row.body = record.to_wire()

        self._commit(PRODUCTION, f"save production record {final_id}")
        logger.info("Saved production record %s for %s", final_id, record.date)
        return record

    def save_rft(self, record: RFTReportRecord) -> RFTReportRecord:
        final_id = record.id or new_id()
        row = self.db.get(RFTReportRow, final_id)
        created_at = row.created_at if row else record.created_at
        record = refresh_rft_percentages(
            record.model_copy(update={"id": final_id, "created_at": created_at})
        )

        if row is None:
            row = RFTReportRow(id=final_id, created_at=record.created_at)
            self.db.add(row)
        row.date = record.date
        row.unit = record.unit
        row.body = record.to_wire()

        self._commit(RFT, f"save RFT record {final_id}")
        logger.info("Saved RFT record %s for %s (%d batches)", final_id, record.date, len(record.entries))
        return record

    def delete_production(self, record_id: str) -> bool:
        return self._delete(ProductionRecordRow, PRODUCTION, record_id)

    def delete_rft(self, record_id: str) -> bool:
        return self._delete(RFTReportRow, RFT, record_id)

    def _delete(self, model, collection: str, record_id: str) -> bool:
        if not record_id:
            return False
        row = self.db.get(model, record_id)
        if row is None:
            return False
        self.db.delete(row)
        self._commit(collection, f"delete {collection} {record_id}")
        logger.info("Deleted %s %s", collection, record_id)
        return True

    def _commit(self, collection: str, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to %s: %s", action, e)
            raise StoreError(f"Failed to {action}") from e

        if self.subscriptions.has_listeners(collection):
            snapshot = self.list_production() if collection == PRODUCTION else self.list_rft()
            self.subscriptions.publish(collection, snapshot)


class SettingsRepository:
    """Dashboard appearance settings, one key/value row per field."""

    def __init__(self, db: Session):
        self.db = db

    def get(self) -> AppSettings:
        values = {row.key: row.value for row in self.db.query(AppSettingRow).all()}
        try:
            return AppSettings.model_validate(values)
        except ValidationError as e:
            logger.warning("Stored settings invalid, using defaults: %s", e)
            return AppSettings()

    def save(self, settings: AppSettings) -> AppSettings:
        for key, value in settings.to_wire().items():
            row = self.db.get(AppSettingRow, key)
            if row is None:
                self.db.add(AppSettingRow(key=key, value=value))
            else:
                row.value = value
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Failed to save settings: %s", e)
            raise StoreError("Failed to save settings") from e
        return settings


def _production_from_row(row: ProductionRecordRow) -> ProductionRecord:
    return ProductionRecord.model_validate({**row.body, "id": row.id})


def _rft_from_row(row: RFTReportRow) -> RFTReportRecord:
    return RFTReportRecord.model_validate({**row.body, "id": row.id})
