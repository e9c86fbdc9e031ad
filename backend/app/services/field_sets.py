"""Field set persistence services."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.extraction.field_extractor import extract_field_values
from app.fields import FIELD_DEFINITIONS, FieldValueSet
from app.models.field_set import FieldSet

logger = logging.getLogger(__name__)


class FieldParsingError(ValueError):
    """Raised when model output cannot be parsed into a field set."""


def get_field_set(db: Session, field_set_id: int | None) -> FieldSet | None:
    """Point lookup by id."""

    if field_set_id is None:
        return None
    return db.scalar(select(FieldSet).where(FieldSet.id == field_set_id))


def load_field_values(db: Session, field_set_id: int | None) -> FieldValueSet | None:
    """Return the tagged values of a field set, or ``None`` if it does not exist."""

    row = get_field_set(db, field_set_id)
    if row is None:
        return None
    return FieldValueSet.from_row(row)


def _apply_values(row: FieldSet, values: FieldValueSet) -> None:
    for definition in FIELD_DEFINITIONS:
        setattr(row, definition.db_key, values[definition.key].to_stored())


def insert_field_set(db: Session, values: FieldValueSet, *, commit: bool = True) -> FieldSet:
    """Insert a new row holding ``values``."""

    row = FieldSet()
    _apply_values(row, values)
    db.add(row)
    if commit:
        db.commit()
        db.refresh(row)
    else:
        db.flush()
    return row


def replace_field_set(db: Session, row: FieldSet, values: FieldValueSet, *, commit: bool = True) -> FieldSet:
    """Overwrite every column of an existing row."""

    _apply_values(row, values)
    if commit:
        db.commit()
        db.refresh(row)
    else:
        db.flush()
    return row


def parse_and_store_field_set(db: Session, markdown: str) -> int:
    """Extract every field from model output, store it as a new row and return its id.

    Fields missing from the output are stored as the ``"empty"`` sentinel, never
    ``None``, so a discovered set always records that the model ran.
    """

    if not markdown:
        raise FieldParsingError("Cannot parse empty markdown")
    values = extract_field_values(markdown)
    row = insert_field_set(db, values)
    logger.info(
        "field_sets.parsed field_set_id=%s fields_with_content=%d",
        row.id,
        sum(1 for value in values.values() if value.has_content),
    )
    return row.id
