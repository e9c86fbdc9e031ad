"""Field definitions, tagged field values and field-by-field comparison."""

from app.fields.comparison import (
    FieldComparison,
    FieldMatch,
    MatchCategory,
    compare_field_sets,
    compute_match,
    percentage_correct,
    round_half_up,
    score_field_sets,
)
from app.fields.definitions import (
    FIELD_DEFINITIONS,
    FieldDefinition,
    FieldKey,
    derive_label,
    get_field_definition,
)
from app.fields.values import EMPTY_SENTINEL, FieldValue, FieldValueKind, FieldValueSet

__all__ = [
    "EMPTY_SENTINEL",
    "FIELD_DEFINITIONS",
    "FieldComparison",
    "FieldDefinition",
    "FieldKey",
    "FieldMatch",
    "FieldValue",
    "FieldValueKind",
    "FieldValueSet",
    "MatchCategory",
    "compare_field_sets",
    "compute_match",
    "derive_label",
    "get_field_definition",
    "percentage_correct",
    "round_half_up",
    "score_field_sets",
]
