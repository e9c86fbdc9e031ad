"""Run execution and run annotation services."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from time import perf_counter

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.fields import FieldComparison, compare_field_sets
from app.llm.openrouter_client import (
    CompletionStream,
    ModelClient,
    ModelInvocationError,
    RunCancelledError,
    TokenUsage,
    build_completion_request,
    get_default_model_client,
)
from app.models.book_input import BookInput
from app.models.prompt import Prompt
from app.models.run import Run
from app.services.field_sets import FieldParsingError, load_field_values, parse_and_store_field_set

logger = logging.getLogger(__name__)

STAR_TAG = "star"
CANCELLED_FINISH_REASON = "cancelled"
ERROR_FINISH_REASON = "error"


class RecordNotFoundError(LookupError):
    """Raised when a run references a book input or prompt that does not exist."""


class DuplicateInvocationError(ValueError):
    """Raised when an invocation id is reused while its run is still in flight."""


@dataclass(slots=True)
class RunResult:
    run: Run
    finish_reason: str | None
    usage: TokenUsage | None


class RunInvocationRegistry:
    """Cancel tokens for in-flight runs, keyed by a caller-chosen invocation id."""

    def __init__(self) -> None:
        self._tokens: dict[str, threading.Event] = {}
        self._lock = threading.Lock()

    @contextmanager
    def track(self, invocation_id: str | None) -> Iterator[threading.Event]:
        token = threading.Event()
        if invocation_id is None:
            yield token
            return
        with self._lock:
            if invocation_id in self._tokens:
                raise DuplicateInvocationError(f"Invocation {invocation_id!r} is already running")
            self._tokens[invocation_id] = token
        try:
            yield token
        finally:
            with self._lock:
                self._tokens.pop(invocation_id, None)

    def cancel(self, invocation_id: str) -> bool:
        """Signal the run's cancel token; ``False`` if nothing is running under that id."""

        with self._lock:
            token = self._tokens.get(invocation_id)
        if token is None:
            return False
        token.set()
        return True

    def is_active(self, invocation_id: str) -> bool:
        with self._lock:
            return invocation_id in self._tokens


@lru_cache
def get_invocation_registry() -> RunInvocationRegistry:
    return RunInvocationRegistry()


def execute_run(
    db: Session,
    *,
    book_input_id: int,
    prompt_id: int,
    model: str | None = None,
    client: ModelClient | None = None,
    cancel_token: threading.Event | None = None,
    on_chunk: Callable[[str], None] | None = None,
) -> RunResult:
    """Stream a prompt over a book input's OCR markdown and store the run.

    ``on_chunk`` receives the accumulated output after every chunk. Cancelled and
    failed runs are still stored with their partial output and a terminal
    finish reason so they stay auditable; the exception is then re-raised.
    """

    book_input = db.scalar(select(BookInput).where(BookInput.id == book_input_id))
    if book_input is None:
        raise RecordNotFoundError(f"Book input {book_input_id} not found")
    prompt = db.scalar(select(Prompt).where(Prompt.id == prompt_id))
    if prompt is None:
        raise RecordNotFoundError(f"Prompt {prompt_id} not found")

    model_id = model or get_settings().default_model
    temperature = prompt.temperature if prompt.temperature is not None else 0.0
    request = build_completion_request(
        prompt.prompt_text or "",
        book_input.ocr_markdown or "",
        model_id,
        temperature,
    )
    active_client = client or get_default_model_client()

    started = perf_counter()
    output = ""
    stream: CompletionStream | None = None

    def record(finish_reason: str | None, discovered_fields_id: int | None = None) -> Run:
        usage = stream.usage if stream is not None else None
        run = Run(
            prompt_id=prompt.id,
            book_input_id=book_input.id,
            discovered_fields_id=discovered_fields_id,
            output=output,
            temperature=temperature,
            model=model_id,
            tokens_used=usage.total_tokens if usage is not None else None,
            seconds_used=round(perf_counter() - started, 3),
            finish_reason=finish_reason,
            human_tags=[],
        )
        db.add(run)
        db.commit()
        db.refresh(run)
        return run

    def record_diagnostic(finish_reason: str) -> None:
        try:
            record(finish_reason)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "runs.diagnostic_record_failed book_input_id=%s prompt_id=%s finish_reason=%s",
                book_input_id,
                prompt_id,
                finish_reason,
            )

    try:
        stream = active_client.stream(request, cancel_token)
        for chunk in stream:
            output += chunk
            if on_chunk is not None:
                on_chunk(output)
    except RunCancelledError:
        record_diagnostic(CANCELLED_FINISH_REASON)
        logger.info(
            "runs.cancelled book_input_id=%s prompt_id=%s model=%s partial_chars=%d",
            book_input_id,
            prompt_id,
            model_id,
            len(output),
        )
        raise
    except ModelInvocationError:
        record_diagnostic((stream.finish_reason if stream is not None else None) or ERROR_FINISH_REASON)
        logger.exception(
            "runs.model_failed book_input_id=%s prompt_id=%s model=%s partial_chars=%d",
            book_input_id,
            prompt_id,
            model_id,
            len(output),
        )
        raise

    finish_reason = stream.finish_reason
    failure = _describe_failure(output, finish_reason)
    if failure is not None:
        record_diagnostic(finish_reason or ERROR_FINISH_REASON)
        logger.error(
            "runs.model_failed book_input_id=%s prompt_id=%s model=%s finish_reason=%s chars=%d",
            book_input_id,
            prompt_id,
            model_id,
            finish_reason,
            len(output),
        )
        raise ModelInvocationError(failure)

    discovered_fields_id: int | None = None
    try:
        discovered_fields_id = parse_and_store_field_set(db, output)
    except FieldParsingError:
        logger.exception("runs.field_parsing_failed book_input_id=%s prompt_id=%s", book_input_id, prompt_id)

    try:
        run = record(finish_reason, discovered_fields_id)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("runs.persist_failed book_input_id=%s prompt_id=%s", book_input_id, prompt_id)
        raise
    logger.info(
        "runs.completed run_id=%s book_input_id=%s prompt_id=%s model=%s finish_reason=%s "
        "tokens=%s seconds=%.2f discovered_fields_id=%s",
        run.id,
        book_input_id,
        prompt_id,
        model_id,
        finish_reason,
        run.tokens_used,
        run.seconds_used or 0.0,
        discovered_fields_id,
    )
    return RunResult(run=run, finish_reason=finish_reason, usage=stream.usage)


def _describe_failure(output: str, finish_reason: str | None) -> str | None:
    if finish_reason == "length":
        return "Ran out of tokens before finishing (max tokens reached)"
    if finish_reason and finish_reason != "stop":
        return f"Streaming finished with reason: {finish_reason}"
    if not output.strip():
        return "Model returned an empty response"
    return None


def get_run(db: Session, run_id: int) -> Run | None:
    return db.scalar(select(Run).where(Run.id == run_id))


def list_runs(
    db: Session,
    *,
    book_input_id: int | None = None,
    prompt_id: int | None = None,
    limit: int = 200,
) -> list[Run]:
    """List runs newest first, optionally filtered."""

    stmt = select(Run)
    if book_input_id is not None:
        stmt = stmt.where(Run.book_input_id == book_input_id)
    if prompt_id is not None:
        stmt = stmt.where(Run.prompt_id == prompt_id)
    stmt = stmt.order_by(Run.created_at.desc(), Run.id.desc()).limit(limit)
    return list(db.scalars(stmt).all())


def find_latest_matching_run(
    db: Session,
    *,
    book_input_id: int,
    prompt_id: int,
    temperature: float,
    model: str,
) -> Run | None:
    """Latest run with exactly this prompt, book input, temperature and model."""

    stmt = (
        select(Run)
        .where(
            Run.book_input_id == book_input_id,
            Run.prompt_id == prompt_id,
            Run.temperature == temperature,
            Run.model == model,
        )
        .order_by(Run.created_at.desc(), Run.id.desc())
        .limit(1)
    )
    return db.scalar(stmt)


def update_run_notes(db: Session, run_id: int, notes: str | None) -> Run | None:
    run = get_run(db, run_id)
    if run is None:
        return None
    run.notes = notes
    db.commit()
    db.refresh(run)
    return run


def set_run_starred(db: Session, run_id: int, starred: bool) -> Run | None:
    """Add or remove the star tag, leaving other human tags untouched."""

    run = get_run(db, run_id)
    if run is None:
        return None
    tags = [tag for tag in (run.human_tags or []) if tag != STAR_TAG]
    if starred:
        tags.append(STAR_TAG)
    run.human_tags = tags
    db.commit()
    db.refresh(run)
    return run


def get_run_field_comparison(db: Session, run_id: int) -> list[FieldComparison] | None:
    """Correct vs discovered values for a run, in presentation order."""

    run = get_run(db, run_id)
    if run is None:
        return None
    correct = None
    if run.book_input_id is not None:
        book_input = db.scalar(select(BookInput).where(BookInput.id == run.book_input_id))
        if book_input is not None:
            correct = load_field_values(db, book_input.correct_fields_id)
    discovered = load_field_values(db, run.discovered_fields_id)
    return compare_field_sets(correct, discovered)
