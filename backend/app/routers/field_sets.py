"""Field set routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.field_set import FieldDefinitionRead, FieldSetParseRequest, FieldSetRead, list_field_definitions
from app.services.field_sets import FieldParsingError, get_field_set, parse_and_store_field_set

router = APIRouter(prefix="/field-sets")


@router.get("/definitions", response_model=ApiResponse[list[FieldDefinitionRead]])
def get_field_definitions() -> ApiResponse[list[FieldDefinitionRead]]:
    """Static field table in presentation order."""

    return ApiResponse(data=list_field_definitions())


@router.post("/parse", response_model=ApiResponse[FieldSetRead], status_code=201)
def post_parse_field_set(
    payload: FieldSetParseRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[FieldSetRead]:
    """Extract fields from annotated markdown and store them as a new field set."""

    try:
        field_set_id = parse_and_store_field_set(db, payload.markdown)
    except FieldParsingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ApiResponse(data=FieldSetRead.from_row(get_field_set(db, field_set_id)))


@router.get("/{field_set_id}", response_model=ApiResponse[FieldSetRead])
def get_one_field_set(
    field_set_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[FieldSetRead]:
    row = get_field_set(db, field_set_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Field set not found")
    return ApiResponse(data=FieldSetRead.from_row(row))
