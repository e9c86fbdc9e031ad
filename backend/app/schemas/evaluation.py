"""Evaluation grid schemas."""

from datetime import datetime

from pydantic import BaseModel


class EvaluationRow(BaseModel):
    """One book input in the evaluation grid."""

    book_input_id: int
    label: str | None
    word_count: int
    score: int | None
    has_correct_fields: bool
    last_test_date: datetime | None = None


class ModelRead(BaseModel):
    """One model offered by the router."""

    id: str
    name: str
