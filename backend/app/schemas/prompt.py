"""Prompt request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PromptCreate(BaseModel):
    """New prompt payload."""

    label: str | None = None
    prompt_text: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)
    notes: str | None = None


class PromptUpdate(BaseModel):
    """Annotation fields that may change without creating a new prompt version."""

    label: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def validate_non_empty_update(self) -> "PromptUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        return self


class PromptSaveRequest(BaseModel):
    """Save the editor state, creating a new prompt only if it differs from the current one."""

    current_prompt_id: int | None = None
    label: str | None = None
    prompt_text: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)


class PromptRead(BaseModel):
    """Serialized prompt."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    label: str | None
    notes: str | None
    prompt_text: str | None
    temperature: float | None


class PromptSaveResult(BaseModel):
    """Prompt to run with, and whether saving inserted a new version."""

    prompt: PromptRead
    created: bool
