"""Run request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RunCreateRequest(BaseModel):
    """Execute a prompt against a book input."""

    book_input_id: int = Field(ge=1)
    prompt_id: int = Field(ge=1)
    model: str | None = Field(default=None, min_length=1)
    invocation_id: str | None = Field(default=None, min_length=1, max_length=128)


class RunUpdateRequest(BaseModel):
    """Human annotation fields on a run."""

    notes: str | None = None
    starred: bool | None = None

    @model_validator(mode="after")
    def validate_non_empty_update(self) -> "RunUpdateRequest":
        if self.notes is None and self.starred is None:
            raise ValueError("At least one field must be provided.")
        return self


class RunRead(BaseModel):
    """Serialized run."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    prompt_id: int | None
    book_input_id: int | None
    discovered_fields_id: int | None
    output: str | None
    temperature: float | None
    model: str | None
    tokens_used: int | None
    seconds_used: float | None
    finish_reason: str | None
    human_tags: list[str]
    notes: str | None


class TokenUsageRead(BaseModel):
    """Provider token accounting."""

    model_config = ConfigDict(from_attributes=True)

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class RunExecutionResult(BaseModel):
    """Outcome of a completed run."""

    run: RunRead
    finish_reason: str | None
    usage: TokenUsageRead | None = None


class CancelResult(BaseModel):
    """Whether a cancel request reached an in-flight run."""

    invocation_id: str
    cancelled: bool


class MarkCorrectResult(BaseModel):
    """Whether a discovered value was copied into the correct field set."""

    run_id: int
    field_key: str
    updated: bool
