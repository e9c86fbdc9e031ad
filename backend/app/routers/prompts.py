"""Prompt routes."""

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from app.db.dependencies import get_db
from app.schemas.common import ApiResponse
from app.schemas.prompt import PromptCreate, PromptRead, PromptSaveRequest, PromptSaveResult, PromptUpdate
from app.services.prompts import create_prompt, get_prompt, list_prompts, save_prompt_if_changed, update_prompt

router = APIRouter(prefix="/prompts")


@router.post("", response_model=ApiResponse[PromptRead], status_code=201)
def post_prompt(
    payload: PromptCreate,
    db: Session = Depends(get_db),
) -> ApiResponse[PromptRead]:
    created = create_prompt(db, payload)
    return ApiResponse(data=PromptRead.model_validate(created))


@router.post("/save", response_model=ApiResponse[PromptSaveResult])
def post_prompt_save(
    payload: PromptSaveRequest,
    db: Session = Depends(get_db),
) -> ApiResponse[PromptSaveResult]:
    """Save editor state; a new prompt version is inserted only when something changed."""

    prompt, created = save_prompt_if_changed(db, payload)
    return ApiResponse(data=PromptSaveResult(prompt=PromptRead.model_validate(prompt), created=created))


@router.get("", response_model=ApiResponse[list[PromptRead]])
def get_prompts(db: Session = Depends(get_db)) -> ApiResponse[list[PromptRead]]:
    """List prompts newest first."""

    return ApiResponse(data=[PromptRead.model_validate(row) for row in list_prompts(db)])


@router.get("/{prompt_id}", response_model=ApiResponse[PromptRead])
def get_one_prompt(
    prompt_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[PromptRead]:
    prompt = get_prompt(db, prompt_id)
    if prompt is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return ApiResponse(data=PromptRead.model_validate(prompt))


@router.patch("/{prompt_id}", response_model=ApiResponse[PromptRead])
def patch_prompt(
    payload: PromptUpdate,
    prompt_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
) -> ApiResponse[PromptRead]:
    """Edit a prompt's label or notes."""

    updated = update_prompt(db, prompt_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Prompt not found")
    return ApiResponse(data=PromptRead.model_validate(updated))
