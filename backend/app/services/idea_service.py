"""Idea record store: create a record, then attach stage results to it.

Stage fields are append-only: each is written at most once, and re-writing
the identical value is a no-op success.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import PersistenceFailure
from ..models.idea import IdeaRecord

logger = logging.getLogger(__name__)

# Public (wire) field name -> ORM column
STAGE_COLUMNS = {
    "marketSnapshot": "market_snapshot_json",
    "featureRoadmap": "feature_roadmap_json",
    "agileSprintPlan": "agile_sprint_plan_json",
}


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def _as_uuid(record_id: Any) -> Optional[uuid.UUID]:
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None


class IdeaRecordStore:
    def __init__(self, db: Session):
        self.db = db

    def create_record(self, idea: str, worklab: Optional[str] = None) -> str:
        """Persist a new record holding only the idea and worklab; return its id."""
        record = IdeaRecord(idea=idea, worklab=worklab)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("[STORE] Failed to create idea record: %s", exc)
            raise PersistenceFailure(f"Failed to create idea record: {exc}") from exc

        logger.info("[STORE] Created idea record id=%s", record.id)
        return str(record.id)

    def update_field(self, record_id: str, field_name: str, value: Any) -> bool:
        """Set one stage field on a record without touching any other column.

        Raises
        ------
        ValueError
            If `field_name` is not a stage field.
        PersistenceFailure
            If the record is missing, the field already holds a different
            value, or the database write fails.
        """
        column = STAGE_COLUMNS.get(field_name)
        if column is None:
            raise ValueError(f"Unknown stage field: {field_name}")

        serialized = _dump(value)
        try:
            record_uuid = _as_uuid(record_id)
            record = self.db.get(IdeaRecord, record_uuid) if record_uuid else None
            if record is None:
                raise PersistenceFailure(f"Idea record {record_id} not found")

            current = getattr(record, column)
            if current is not None:
                if current == serialized:
                    return True
                raise PersistenceFailure(
                    f"Field '{field_name}' on record {record_id} is already populated"
                )

            setattr(record, column, serialized)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("[STORE] Failed to update %s on record %s: %s", field_name, record_id, exc)
            raise PersistenceFailure(f"Failed to update '{field_name}': {exc}") from exc

        logger.info("[STORE] Stored %s on record id=%s", field_name, record_id)
        return True

    def get_record(self, record_id: str) -> Optional[IdeaRecord]:
        record_uuid = _as_uuid(record_id)
        if record_uuid is None:
            return None
        try:
            return self.db.get(IdeaRecord, record_uuid)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Failed to load idea record {record_id}: {exc}") from exc


def load_stage_field(record: IdeaRecord, field_name: str) -> Any:
    """Return the decoded JSON stored for a stage field, or None."""
    raw = getattr(record, STAGE_COLUMNS[field_name])
    if raw is None:
        return None
    return json.loads(raw)
