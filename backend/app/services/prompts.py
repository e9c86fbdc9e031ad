"""Prompt services.

Prompts are versioned by insertion: changing the text, temperature or label of a
prompt that runs already point at creates a new row.
"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.prompt import Prompt
from app.schemas.prompt import PromptCreate, PromptSaveRequest, PromptUpdate


def create_prompt(db: Session, payload: PromptCreate) -> Prompt:
    prompt = Prompt(
        label=payload.label,
        prompt_text=payload.prompt_text,
        temperature=payload.temperature,
        notes=payload.notes,
    )
    db.add(prompt)
    db.commit()
    db.refresh(prompt)
    return prompt


def get_prompt(db: Session, prompt_id: int) -> Prompt | None:
    return db.scalar(select(Prompt).where(Prompt.id == prompt_id))


def list_prompts(db: Session) -> list[Prompt]:
    """List prompts newest first."""

    stmt = select(Prompt).order_by(Prompt.created_at.desc(), Prompt.id.desc())
    return list(db.scalars(stmt).all())


def update_prompt(db: Session, prompt_id: int, payload: PromptUpdate) -> Prompt | None:
    """Update label/notes in place; text and temperature go through ``save_prompt_if_changed``."""

    prompt = get_prompt(db, prompt_id)
    if prompt is None:
        return None
    if "label" in payload.model_fields_set:
        prompt.label = payload.label
    if "notes" in payload.model_fields_set:
        prompt.notes = payload.notes
    db.commit()
    db.refresh(prompt)
    return prompt


def save_prompt_if_changed(db: Session, payload: PromptSaveRequest) -> tuple[Prompt, bool]:
    """Return the prompt to run with and whether a new version was inserted."""

    current = get_prompt(db, payload.current_prompt_id) if payload.current_prompt_id is not None else None
    if current is not None and (
        (current.prompt_text or "") == payload.prompt_text
        and (current.temperature or 0.0) == payload.temperature
        and (current.label or "") == (payload.label or "")
    ):
        return current, False
    created = create_prompt(
        db,
        PromptCreate(label=payload.label, prompt_text=payload.prompt_text, temperature=payload.temperature),
    )
    return created, True
