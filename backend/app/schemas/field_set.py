"""Field set and field comparison schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.fields import FIELD_DEFINITIONS, FieldComparison, FieldKey, FieldValueSet
from app.models.field_set import FieldSet


class FieldDefinitionRead(BaseModel):
    """One row of the static field table."""

    key: str
    markdown_key: str
    label: str


class FieldSetRead(BaseModel):
    """Serialized field set; ``None`` is unknown and ``"empty"`` is the empty sentinel."""

    id: int
    created_at: datetime
    values: dict[str, str | None]

    @classmethod
    def from_row(cls, row: FieldSet) -> "FieldSetRead":
        return cls(id=row.id, created_at=row.created_at, values=FieldValueSet.from_row(row).to_stored())


class FieldSetWrite(BaseModel):
    """Manual edit of a correct field set; omitted keys keep their current value."""

    values: dict[str, str | None] = Field(min_length=1)

    @field_validator("values")
    @classmethod
    def validate_keys(cls, values: dict[str, str | None]) -> dict[str, str | None]:
        allowed = {key.value for key in FieldKey}
        unknown = sorted(set(values) - allowed)
        if unknown:
            raise ValueError(f"Unknown field keys: {', '.join(unknown)}")
        return values


class FieldComparisonRead(BaseModel):
    """One comparison row, in presentation order."""

    key: str
    label: str
    correct_value: str
    discovered_value: str
    category: int
    is_match: bool
    exact_match: bool
    correctness: Literal["correct", "wrong", "unknown"]

    @classmethod
    def from_comparison(cls, row: FieldComparison) -> "FieldComparisonRead":
        return cls(
            key=row.definition.db_key,
            label=row.definition.label,
            correct_value=row.correct.display_text(),
            discovered_value=row.discovered.display_text(),
            category=int(row.match.category),
            is_match=row.match.is_match,
            exact_match=row.match.exact_match,
            correctness=row.match.correctness,
        )


def list_field_definitions() -> list[FieldDefinitionRead]:
    return [
        FieldDefinitionRead(key=definition.db_key, markdown_key=definition.markdown_key, label=definition.label)
        for definition in FIELD_DEFINITIONS
    ]


class FieldSetParseRequest(BaseModel):
    """Annotated markdown to extract fields from."""

    markdown: str
