"""
Biography Store: owns the single-row `user_bio` table.
"""

import json
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

from .db import Database
from .errors import StorageError, ValidationError
from .schema import BIO_FIELDS, LIST_FIELDS, UNSET, Biography, FieldUpdate, UpdateKind, next_timestamp, utc_now
from ..util.logging import logger

BIO_ROW_ID = 1


def validate_field_value(field: str, value: Any) -> None:
    """Check a non-null value against the field's type."""
    if field not in BIO_FIELDS:
        raise ValidationError(f"Unknown biography field: {field}. Valid fields: {', '.join(BIO_FIELDS)}")
    if value is None:
        return
    if field in LIST_FIELDS:
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValidationError(f"Field '{field}' must be a list of strings")
    elif not isinstance(value, str):
        raise ValidationError(f"Field '{field}' must be a string")


def _encode(field: str, value: Any) -> Optional[str]:
    if value is None:
        return None
    if field in LIST_FIELDS:
        return json.dumps(value, ensure_ascii=False)
    return value


def _decode(field: str, raw: Optional[str]) -> Any:
    if raw is None:
        return None
    if field in LIST_FIELDS:
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt biography field '{field}': {e}") from e
    return raw


class BiographyStore:
    """The user's profile: one record, partial updates, explicit clearing."""

    def __init__(self, db: Database, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self.clock = clock

    def get(self) -> Optional[Biography]:
        """Return the biography, or None if it was never set."""
        row = self.db.fetch_one("SELECT * FROM user_bio WHERE id = ?", (BIO_ROW_ID,))
        if row is None:
            return None
        values = {field: _decode(field, row[field]) for field in BIO_FIELDS}
        return Biography(created_at=row["created_at"], updated_at=row["updated_at"], **values)

    def upsert(self, updates: Mapping[str, FieldUpdate]) -> bool:
        """Create or update the biography.

        Fields missing from `updates` (or given as UNSET) keep their stored
        value, or stay absent when the record is being created. CLEAR sets a
        field absent.

        Returns:
            True if the record was created, False if an existing one was updated.
        """
        for field, update in updates.items():
            validate_field_value(field, update.value)

        moment = self.clock()
        with self.db.transaction() as conn:
            row = conn.execute("SELECT * FROM user_bio WHERE id = ?", (BIO_ROW_ID,)).fetchone()
            now = next_timestamp(moment, row["updated_at"] if row is not None else None)
            current: Dict[str, Optional[str]] = {
                field: (row[field] if row is not None else None) for field in BIO_FIELDS
            }
            stored = {}
            for field in BIO_FIELDS:
                update = updates.get(field, UNSET)
                if update.kind is UpdateKind.UNSET:
                    stored[field] = current[field]
                else:
                    stored[field] = _encode(field, update.apply(None))

            columns = [stored[field] for field in BIO_FIELDS]
            if row is not None:
                assignments = ", ".join(f"{field} = ?" for field in BIO_FIELDS)
                conn.execute(
                    f"UPDATE user_bio SET {assignments}, updated_at = ? WHERE id = ?",
                    (*columns, now, BIO_ROW_ID),
                )
            else:
                placeholders = ", ".join("?" for _ in BIO_FIELDS)
                conn.execute(
                    f"INSERT INTO user_bio (id, {', '.join(BIO_FIELDS)}, created_at, updated_at) "
                    f"VALUES (?, {placeholders}, ?, ?)",
                    (BIO_ROW_ID, *columns, now, now),
                )

        created = row is None
        touched = [field for field, update in updates.items() if update.kind is not UpdateKind.UNSET]
        logger.log_bio_operation("create" if created else "update", touched)
        return created

    def patch(self, field: str, value: Any) -> bool:
        """Set a single field on an existing biography.

        Returns:
            False without writing if no biography exists yet.
        """
        validate_field_value(field, value)
        moment = self.clock()

        with self.db.transaction() as conn:
            row = conn.execute("SELECT updated_at FROM user_bio WHERE id = ?", (BIO_ROW_ID,)).fetchone()
            applied = row is not None
            if applied:
                # field is one of BIO_FIELDS, so interpolating the column name is safe
                conn.execute(
                    f"UPDATE user_bio SET {field} = ?, updated_at = ? WHERE id = ?",
                    (_encode(field, value), next_timestamp(moment, row["updated_at"]), BIO_ROW_ID),
                )

        logger.log_bio_operation("patch", [field], status="success" if applied else "not_found")
        return applied
