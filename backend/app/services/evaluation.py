"""Evaluation grid: one scored row per book input."""

import re

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.run import Run
from app.schemas.evaluation import EvaluationRow
from app.services.book_inputs import list_book_inputs
from app.services.scoring import get_score

_MARKDOWN_SYNTAX_RE = re.compile(r"[#*_`\[\]]")


def count_words(markdown: str | None) -> int:
    """Whitespace-separated words once markdown syntax characters are removed."""

    if not markdown:
        return 0
    return len(_MARKDOWN_SYNTAX_RE.sub("", markdown).split())


def _last_test_date(db: Session, book_input_id: int, prompt_id: int, model: str):
    stmt = (
        select(Run.created_at)
        .where(Run.book_input_id == book_input_id, Run.prompt_id == prompt_id, Run.model == model)
        .order_by(Run.created_at.desc(), Run.id.desc())
        .limit(1)
    )
    return db.scalar(stmt)


def list_evaluation_rows(
    db: Session,
    *,
    prompt_id: int | None = None,
    model: str | None = None,
) -> list[EvaluationRow]:
    """Rows in book input order; ``last_test_date`` needs both a prompt and a model."""

    rows: list[EvaluationRow] = []
    for book_input in list_book_inputs(db):
        last_test_date = None
        if prompt_id is not None and model:
            last_test_date = _last_test_date(db, book_input.id, prompt_id, model)
        rows.append(
            EvaluationRow(
                book_input_id=book_input.id,
                label=book_input.label,
                word_count=count_words(book_input.ocr_markdown),
                score=get_score(db, book_input.id),
                has_correct_fields=book_input.correct_fields_id is not None,
                last_test_date=last_test_date,
            )
        )
    return rows
