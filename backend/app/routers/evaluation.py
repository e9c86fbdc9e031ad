"""Evaluation grid and model catalog routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.llm.model_catalog import get_model_catalog
from app.schemas.common import ApiResponse
from app.schemas.evaluation import EvaluationRow, ModelRead
from app.services.evaluation import list_evaluation_rows

router = APIRouter()


@router.get("/evaluation", response_model=ApiResponse[list[EvaluationRow]])
def get_evaluation(
    prompt_id: int | None = Query(default=None, ge=1),
    model: str | None = Query(default=None, min_length=1),
    db: Session = Depends(get_db),
) -> ApiResponse[list[EvaluationRow]]:
    """Score every book input against its latest run."""

    return ApiResponse(data=list_evaluation_rows(db, prompt_id=prompt_id, model=model))


@router.get("/models", response_model=ApiResponse[list[ModelRead]])
def get_models() -> ApiResponse[list[ModelRead]]:
    """Models offered by the router, sorted by name; empty when the catalog is unreachable."""

    models = get_model_catalog().get_models()
    return ApiResponse(data=[ModelRead(id=model.id, name=model.name) for model in models])
