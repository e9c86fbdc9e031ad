"""Book input routes, including the correct-field editor and scoring."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.book_input import BookInputCreate, BookInputRead, BookInputUpdate, ScoreRead
from app.schemas.common import ApiResponse, DeleteResult
from app.schemas.field_set import FieldSetRead, FieldSetWrite
from app.services.book_inputs import (
    create_book_input,
    delete_book_input,
    get_book_input,
    list_book_inputs,
    update_book_input,
)
from app.services.corrections import save_correct_fields
from app.services.field_sets import get_field_set
from app.services.scoring import get_score

router = APIRouter(prefix="/book-inputs")


@router.post("", response_model=ApiResponse[BookInputRead], status_code=201)
def post_book_input(
    payload: BookInputCreate,
    db: Session = Depends(get_db),
) -> ApiResponse[BookInputRead]:
    """Create one book input."""

    created = create_book_input(db, payload)
    return ApiResponse(data=BookInputRead.model_validate(created))


@router.get("", response_model=ApiResponse[list[BookInputRead]])
def get_book_inputs(db: Session = Depends(get_db)) -> ApiResponse[list[BookInputRead]]:
    """List book inputs by label."""

    rows = list_book_inputs(db)
    return ApiResponse(data=[BookInputRead.model_validate(row) for row in rows])


@router.get("/{book_input_id}", response_model=ApiResponse[BookInputRead])
def get_one_book_input(
    book_input_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[BookInputRead]:
    book_input = get_book_input(db, book_input_id)
    if book_input is None:
        raise HTTPException(status_code=404, detail="Book input not found")
    return ApiResponse(data=BookInputRead.model_validate(book_input))


@router.patch("/{book_input_id}", response_model=ApiResponse[BookInputRead])
def patch_book_input(
    payload: BookInputUpdate,
    book_input_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[BookInputRead]:
    """Edit one book input row."""

    updated = update_book_input(db, book_input_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Book input not found")
    return ApiResponse(data=BookInputRead.model_validate(updated))


@router.delete("/{book_input_id}", response_model=ApiResponse[DeleteResult])
def remove_book_input(
    book_input_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[DeleteResult]:
    """Delete one book input with its runs and field sets."""

    deleted = delete_book_input(db, book_input_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Book input not found")
    return ApiResponse(data=DeleteResult(id=book_input_id, deleted=True))


@router.get("/{book_input_id}/correct-fields", response_model=ApiResponse[FieldSetRead | None])
def get_correct_fields(
    book_input_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[FieldSetRead | None]:
    """Return the ground-truth field set, or ``null`` before the first edit."""

    book_input = get_book_input(db, book_input_id)
    if book_input is None:
        raise HTTPException(status_code=404, detail="Book input not found")
    row = get_field_set(db, book_input.correct_fields_id)
    return ApiResponse(data=FieldSetRead.from_row(row) if row is not None else None)


@router.put("/{book_input_id}/correct-fields", response_model=ApiResponse[FieldSetRead])
def put_correct_fields(
    payload: FieldSetWrite,
    book_input_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[FieldSetRead]:
    """Save manual edits to the ground-truth field set."""

    row = save_correct_fields(db, book_input_id, payload.values)
    if row is None:
        raise HTTPException(status_code=404, detail="Book input not found")
    return ApiResponse(data=FieldSetRead.from_row(row))


@router.get("/{book_input_id}/score", response_model=ApiResponse[ScoreRead])
def get_book_input_score(
    book_input_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[ScoreRead]:
    """Score the latest run; ``score`` is ``null`` when there is nothing to grade."""

    if get_book_input(db, book_input_id) is None:
        raise HTTPException(status_code=404, detail="Book input not found")
    return ApiResponse(data=ScoreRead(book_input_id=book_input_id, score=get_score(db, book_input_id)))
