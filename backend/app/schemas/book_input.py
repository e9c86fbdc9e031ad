"""Book input request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator


class BookInputCreate(BaseModel):
    """New book input payload."""

    label: str | None = None
    ocr_markdown: str | None = None
    reference_markdown: str | None = None
    notes: str | None = None


class BookInputUpdate(BaseModel):
    """Allowed mutable fields for a book input row."""

    label: str | None = None
    ocr_markdown: str | None = None
    reference_markdown: str | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def validate_non_empty_update(self) -> "BookInputUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided.")
        return self


class BookInputRead(BaseModel):
    """Serialized book input."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    label: str | None
    notes: str | None
    ocr_markdown: str | None
    reference_markdown: str | None
    correct_fields_id: int | None


class ScoreRead(BaseModel):
    """Latest-run score for a book input; ``score`` is ``None`` when it cannot be graded."""

    book_input_id: int
    score: int | None
