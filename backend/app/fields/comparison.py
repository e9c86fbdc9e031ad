"""Field-by-field comparison of correct and discovered values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

from app.fields.definitions import FIELD_DEFINITIONS, FieldDefinition
from app.fields.values import FieldValue, FieldValueSet

Correctness = Literal["correct", "wrong", "unknown"]


class MatchCategory(IntEnum):
    """Presentation priority; lower values are listed first."""

    MISMATCH = 1
    UNEXPECTED = 2
    MATCH = 3
    BOTH_EMPTY = 4


@dataclass(frozen=True, slots=True)
class FieldMatch:
    category: MatchCategory
    is_match: bool
    exact_match: bool
    correctness: Correctness


@dataclass(frozen=True, slots=True)
class FieldComparison:
    definition: FieldDefinition
    correct: FieldValue
    discovered: FieldValue
    match: FieldMatch


def compute_match(correct: FieldValue, discovered: FieldValue) -> FieldMatch:
    """Classify one field.

    Only real content counts as present: unknown and the empty sentinel are both
    empty here. ``is_match`` ignores surrounding whitespace and case while
    ``exact_match`` backs the per-row badge and compares raw display text.
    """

    has_correct = correct.has_content
    has_discovered = discovered.has_content
    is_match = correct.normalized() == discovered.normalized()

    if has_correct and not (has_discovered and is_match):
        category = MatchCategory.MISMATCH
    elif not has_correct and has_discovered:
        category = MatchCategory.UNEXPECTED
    elif has_correct:
        category = MatchCategory.MATCH
    else:
        category = MatchCategory.BOTH_EMPTY

    exact_match = correct.display_text() == discovered.display_text()
    if not correct.display_text():
        correctness: Correctness = "unknown"
    elif exact_match:
        correctness = "correct"
    else:
        correctness = "wrong"
    return FieldMatch(category=category, is_match=is_match, exact_match=exact_match, correctness=correctness)


def compare_field_sets(
    correct: FieldValueSet | None,
    discovered: FieldValueSet | None,
) -> list[FieldComparison]:
    """Compare every defined field, mismatches first, table order within a category."""

    correct = correct or FieldValueSet()
    discovered = discovered or FieldValueSet()
    rows = [
        FieldComparison(
            definition=definition,
            correct=correct[definition.key],
            discovered=discovered[definition.key],
            match=compute_match(correct[definition.key], discovered[definition.key]),
        )
        for definition in FIELD_DEFINITIONS
    ]
    # sorted() is stable, so table order survives within a category.
    return sorted(rows, key=lambda row: row.match.category)


def round_half_up(value: float) -> int:
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def score_field_sets(correct: FieldValueSet, discovered: FieldValueSet) -> int | None:
    """Percentage of evaluable fields the discovered set got right.

    Every field with a known correct value is evaluable, including the empty
    sentinel (expected value: nothing). Returns ``None`` when the correct set has
    no real content to grade against.
    """

    if not correct.has_any_content():
        return None
    return percentage_correct(correct, discovered)


def percentage_correct(correct: FieldValueSet, discovered: FieldValueSet) -> int:
    """Unguarded percentage; an all-unknown correct set scores 0."""

    total_fields = 0
    correct_fields = 0
    for definition in FIELD_DEFINITIONS:
        expected = correct[definition.key]
        if not expected.is_known:
            continue
        total_fields += 1
        if expected.normalized() == discovered[definition.key].normalized():
            correct_fields += 1
    if total_fields == 0:
        return 0
    return round_half_up(correct_fields / total_fields * 100)
