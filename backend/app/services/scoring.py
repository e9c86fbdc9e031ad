"""Score book inputs against the discovered fields of their latest run."""

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.fields import FieldValueSet, score_field_sets
from app.models.book_input import BookInput
from app.models.run import Run
from app.services.field_sets import load_field_values

logger = logging.getLogger(__name__)


def get_latest_run(db: Session, book_input_id: int) -> Run | None:
    """Most recent run for a book input by creation time (id breaks ties)."""

    stmt = (
        select(Run)
        .where(Run.book_input_id == book_input_id)
        .order_by(Run.created_at.desc(), Run.id.desc())
        .limit(1)
    )
    return db.scalar(stmt)


def load_correct_values(db: Session, book_input: BookInput) -> FieldValueSet | None:
    return load_field_values(db, book_input.correct_fields_id)


def get_score(db: Session, book_input_id: int) -> int | None:
    """Percentage (0-100) of correct fields in the latest run, or ``None`` if it cannot be graded."""

    book_input = db.scalar(select(BookInput).where(BookInput.id == book_input_id))
    if book_input is None:
        return _skip(book_input_id, "book_input_missing")
    correct = load_correct_values(db, book_input)
    if correct is None:
        return _skip(book_input_id, "no_correct_fields")

    latest_run = get_latest_run(db, book_input_id)
    if latest_run is None:
        return _skip(book_input_id, "no_runs")
    discovered = load_field_values(db, latest_run.discovered_fields_id)
    if discovered is None:
        return _skip(book_input_id, "latest_run_without_discovered_fields", run_id=latest_run.id)

    score = score_field_sets(correct, discovered)
    if score is None:
        return _skip(book_input_id, "no_evaluable_ground_truth", run_id=latest_run.id)
    logger.debug("scoring.scored book_input_id=%s run_id=%s score=%s", book_input_id, latest_run.id, score)
    return score


def _skip(book_input_id: int, reason: str, *, run_id: int | None = None) -> None:
    logger.debug("scoring.skipped book_input_id=%s run_id=%s reason=%s", book_input_id, run_id, reason)
    return None
