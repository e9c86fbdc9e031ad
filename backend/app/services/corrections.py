"""Human-in-the-loop edits of a book input's correct field set."""

import logging
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.fields import FieldKey, FieldValue, FieldValueSet
from app.models.book_input import BookInput
from app.models.field_set import FieldSet
from app.models.run import Run
from app.services.field_sets import get_field_set, insert_field_set, load_field_values, replace_field_set

logger = logging.getLogger(__name__)


def _ensure_correct_field_set(db: Session, book_input: BookInput) -> FieldSet:
    """Return the book input's correct field set, creating and linking it on first use."""

    existing = get_field_set(db, book_input.correct_fields_id)
    if existing is not None:
        return existing
    created = insert_field_set(db, FieldValueSet(), commit=False)
    book_input.correct_fields_id = created.id
    return created


def save_correct_fields(
    db: Session,
    book_input_id: int,
    values: Mapping[str, str | None],
) -> FieldSet | None:
    """Apply manual edits; the whole row is rewritten so the last save wins."""

    book_input = db.scalar(select(BookInput).where(BookInput.id == book_input_id))
    if book_input is None:
        return None
    row = _ensure_correct_field_set(db, book_input)
    current = FieldValueSet.from_row(row)
    for raw_key, raw_value in values.items():
        text = raw_value.strip() if isinstance(raw_value, str) else None
        current = current.replace(FieldKey(raw_key), FieldValue.from_stored(text))
    return replace_field_set(db, row, current)


def mark_field_correct(db: Session, run_id: int, field_key: FieldKey | str) -> bool:
    """Copy a run's discovered value for one field into its book input's correct set.

    Returns ``False`` (and logs) when the run, its book input or its discovered
    value cannot be resolved.
    """

    key = FieldKey(field_key)
    run = db.scalar(select(Run).where(Run.id == run_id))
    if run is None or run.book_input_id is None:
        logger.warning("corrections.unresolved run_id=%s field=%s reason=run_or_book_input_missing", run_id, key.value)
        return False
    book_input = db.scalar(select(BookInput).where(BookInput.id == run.book_input_id))
    if book_input is None:
        logger.warning("corrections.unresolved run_id=%s field=%s reason=book_input_missing", run_id, key.value)
        return False
    discovered = load_field_values(db, run.discovered_fields_id)
    if discovered is None or not discovered[key].is_known:
        logger.warning("corrections.unresolved run_id=%s field=%s reason=no_discovered_value", run_id, key.value)
        return False

    value = discovered[key]
    if value.has_content:
        value = FieldValue.of(value.text.strip())
    row = _ensure_correct_field_set(db, book_input)
    replace_field_set(db, row, FieldValueSet.from_row(row).replace(key, value))
    logger.info(
        "corrections.marked_correct run_id=%s book_input_id=%s field=%s",
        run_id,
        book_input.id,
        key.value,
    )
    return True
