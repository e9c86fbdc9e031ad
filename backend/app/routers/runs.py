"""Run execution, annotation and cancellation routes."""

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.fields import FieldKey
from app.llm.openrouter_client import ModelInvocationError, RunCancelledError
from app.schemas.common import ApiResponse
from app.schemas.field_set import FieldComparisonRead
from app.schemas.run import (
    CancelResult,
    MarkCorrectResult,
    RunCreateRequest,
    RunExecutionResult,
    RunRead,
    RunUpdateRequest,
    TokenUsageRead,
)
from app.services.corrections import mark_field_correct
from app.services.runs import (
    DuplicateInvocationError,
    RecordNotFoundError,
    execute_run,
    get_invocation_registry,
    get_run,
    get_run_field_comparison,
    list_runs,
    set_run_starred,
    update_run_notes,
)

router = APIRouter(prefix="/runs")


@router.post("", response_model=ApiResponse[RunExecutionResult])
def post_run(
    payload: RunCreateRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[RunExecutionResult]:
    """Run a prompt over a book input and store the result.

    Pass ``invocation_id`` to be able to stop the run from another request.
    """

    registry = get_invocation_registry()
    try:
        with registry.track(payload.invocation_id) as cancel_token:
            result = execute_run(
                db,
                book_input_id=payload.book_input_id,
                prompt_id=payload.prompt_id,
                model=payload.model,
                cancel_token=cancel_token,
            )
    except DuplicateInvocationError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RecordNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RunCancelledError as exc:
        raise HTTPException(status_code=409, detail="Run stopped") from exc
    except ModelInvocationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    usage = TokenUsageRead.model_validate(result.usage) if result.usage is not None else None
    return ApiResponse(
        data=RunExecutionResult(
            run=RunRead.model_validate(result.run),
            finish_reason=result.finish_reason,
            usage=usage,
        )
    )


@router.post("/invocations/{invocation_id}/cancel", response_model=ApiResponse[CancelResult])
def cancel_run(
    invocation_id: str = Path(..., min_length=1, max_length=128),
) -> ApiResponse[CancelResult]:
    """Stop an in-flight run; ``cancelled`` is false when nothing was running."""

    cancelled = get_invocation_registry().cancel(invocation_id)
    return ApiResponse(data=CancelResult(invocation_id=invocation_id, cancelled=cancelled))


@router.get("", response_model=ApiResponse[list[RunRead]])
def get_runs(
    book_input_id: int | None = Query(default=None, ge=1),
    prompt_id: int | None = Query(default=None, ge=1),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> ApiResponse[list[RunRead]]:
    """List runs newest first."""

    rows = list_runs(db, book_input_id=book_input_id, prompt_id=prompt_id, limit=limit)
    return ApiResponse(data=[RunRead.model_validate(row) for row in rows])


@router.get("/{run_id}", response_model=ApiResponse[RunRead])
def get_one_run(
    run_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[RunRead]:
    run = get_run(db, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return ApiResponse(data=RunRead.model_validate(run))


@router.patch("/{run_id}", response_model=ApiResponse[RunRead])
def patch_run(
    payload: RunUpdateRequest,
    run_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[RunRead]:
    """Edit run notes and/or the star tag."""

    run = get_run(db, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    if payload.notes is not None:
        run = update_run_notes(db, run_id, payload.notes)
    if payload.starred is not None:
        run = set_run_starred(db, run_id, payload.starred)
    return ApiResponse(data=RunRead.model_validate(run))


@router.get("/{run_id}/fields", response_model=ApiResponse[list[FieldComparisonRead]])
def get_run_fields(
    run_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[FieldComparisonRead]]:
    """Correct vs discovered values, mismatches first."""

    rows = get_run_field_comparison(db, run_id)
    if rows is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return ApiResponse(data=[FieldComparisonRead.from_comparison(row) for row in rows])


@router.post("/{run_id}/fields/{field_key}/mark-correct", response_model=ApiResponse[MarkCorrectResult])
def post_mark_correct(
    run_id: int = Path(..., ge=1),
    field_key: FieldKey = Path(...),
    db: Session = Depends(get_db),
) -> ApiResponse[MarkCorrectResult]:
    """Copy the run's discovered value for one field into the ground truth."""

    updated = mark_field_correct(db, run_id, field_key)
    return ApiResponse(data=MarkCorrectResult(run_id=run_id, field_key=field_key.value, updated=updated))
