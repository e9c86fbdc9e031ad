"""Unit tests for tagged field values, match classification and percentage scoring."""

from __future__ import annotations

import unittest

from app.fields import (
    FIELD_DEFINITIONS,
    FieldKey,
    FieldValue,
    FieldValueKind,
    FieldValueSet,
    MatchCategory,
    compare_field_sets,
    compute_match,
    get_field_definition,
    percentage_correct,
    round_half_up,
    score_field_sets,
)


def _set(**values: str | None) -> FieldValueSet:
    return FieldValueSet.from_stored(values)


class FieldValueTests(unittest.TestCase):
    def test_stored_forms_map_to_three_states(self) -> None:
        self.assertIs(FieldValue.from_stored(None).kind, FieldValueKind.UNKNOWN)
        self.assertIs(FieldValue.from_stored("  ").kind, FieldValueKind.UNKNOWN)
        self.assertIs(FieldValue.from_stored("empty").kind, FieldValueKind.EMPTY)
        self.assertEqual(FieldValue.from_stored("Foo"), FieldValue(FieldValueKind.VALUE, "Foo"))

    def test_round_trips_through_storage(self) -> None:
        for value in (FieldValue.unknown(), FieldValue.empty(), FieldValue.of("Foo")):
            with self.subTest(value=value):
                self.assertEqual(FieldValue.from_stored(value.to_stored()), value)

    def test_blank_extraction_becomes_empty_sentinel(self) -> None:
        self.assertEqual(FieldValue.of("").to_stored(), "empty")
        self.assertEqual(FieldValue.of(None).to_stored(), "empty")

    def test_literal_empty_text_reads_back_as_sentinel(self) -> None:
        extracted = FieldValue.of("empty")

        self.assertIs(extracted.kind, FieldValueKind.VALUE)
        self.assertEqual(extracted.to_stored(), "empty")
        self.assertEqual(FieldValue.from_stored(extracted.to_stored()), FieldValue.empty())

    def test_value_set_covers_every_definition_in_order(self) -> None:
        values = FieldValueSet({FieldKey.AUTHOR: FieldValue.of("Jane")})

        self.assertEqual(list(values), [definition.key for definition in FIELD_DEFINITIONS])
        self.assertEqual(values["author"].text, "Jane")
        self.assertFalse(values[FieldKey.ISBN].is_known)
        with self.assertRaises(KeyError):
            values["not_a_field"]

    def test_replace_returns_a_new_set(self) -> None:
        original = FieldValueSet()
        updated = original.replace(FieldKey.TOPIC, FieldValue.of("Animals"))

        self.assertFalse(original[FieldKey.TOPIC].is_known)
        self.assertEqual(updated[FieldKey.TOPIC].text, "Animals")

    def test_definition_defaults(self) -> None:
        self.assertEqual(get_field_definition("license_url").markdown_key, "licenseUrl")
        self.assertEqual(get_field_definition("copyright").markdown_key, "copyright")
        self.assertEqual(get_field_definition("original_publisher").label, "Original Publisher")


class ComputeMatchTests(unittest.TestCase):
    def test_missing_discovered_value_is_mismatch(self) -> None:
        match = compute_match(FieldValue.of("X"), FieldValue.empty())

        self.assertIs(match.category, MatchCategory.MISMATCH)
        self.assertFalse(match.is_match)

    def test_different_values_are_mismatch(self) -> None:
        match = compute_match(FieldValue.of("X"), FieldValue.of("Y"))

        self.assertIs(match.category, MatchCategory.MISMATCH)
        self.assertEqual(match.correctness, "wrong")

    def test_discovered_without_correct_is_unexpected(self) -> None:
        match = compute_match(FieldValue.unknown(), FieldValue.of("Y"))

        self.assertIs(match.category, MatchCategory.UNEXPECTED)
        self.assertEqual(match.correctness, "unknown")

    def test_normalized_equal_values_match(self) -> None:
        match = compute_match(FieldValue.of("Foo"), FieldValue.of(" foo "))

        self.assertIs(match.category, MatchCategory.MATCH)
        self.assertTrue(match.is_match)
        self.assertFalse(match.exact_match)

    def test_nothing_on_either_side_is_both_empty(self) -> None:
        for correct, discovered in (
            (FieldValue.unknown(), FieldValue.unknown()),
            (FieldValue.empty(), FieldValue.empty()),
            (FieldValue.empty(), FieldValue.unknown()),
        ):
            with self.subTest(correct=correct, discovered=discovered):
                match = compute_match(correct, discovered)
                self.assertIs(match.category, MatchCategory.BOTH_EMPTY)
                self.assertTrue(match.is_match)

    def test_exact_sentinel_match_is_marked_correct(self) -> None:
        match = compute_match(FieldValue.empty(), FieldValue.empty())

        self.assertTrue(match.exact_match)
        self.assertEqual(match.correctness, "correct")


class CompareFieldSetsTests(unittest.TestCase):
    def test_mismatch_and_unexpected_sort_before_match_and_empty(self) -> None:
        correct = _set(title_l1="Foo", copyright="Bar", isbn="123")
        discovered = _set(title_l1="Foo", copyright="Baz", author="Jane", isbn="124")

        rows = compare_field_sets(correct, discovered)
        keys = [row.definition.key for row in rows]
        categories = [row.match.category for row in rows]

        self.assertEqual(categories, sorted(categories))
        self.assertEqual(keys[:4], [FieldKey.COPYRIGHT, FieldKey.ISBN, FieldKey.AUTHOR, FieldKey.TITLE_L1])
        both_empty = [row.definition.key for row in rows if row.match.category is MatchCategory.BOTH_EMPTY]
        table_order = [d.key for d in FIELD_DEFINITIONS if d.key in both_empty]
        self.assertEqual(both_empty, table_order)

    def test_missing_sets_compare_as_all_unknown(self) -> None:
        rows = compare_field_sets(None, None)

        self.assertEqual(len(rows), len(FIELD_DEFINITIONS))
        self.assertTrue(all(row.match.category is MatchCategory.BOTH_EMPTY for row in rows))


class ScoringTests(unittest.TestCase):
    def test_case_and_whitespace_insensitive_full_score(self) -> None:
        correct = _set(title_l1="Foo", copyright="empty")
        discovered = _set(title_l1="foo ", copyright="empty")

        self.assertEqual(score_field_sets(correct, discovered), 100)

    def test_wrong_value_scores_zero(self) -> None:
        self.assertEqual(score_field_sets(_set(title_l1="Foo"), _set(title_l1="Bar")), 0)

    def test_empty_sentinel_counts_as_an_evaluable_field(self) -> None:
        correct = _set(title_l1="Foo", copyright="empty", isbn="123")
        discovered = _set(title_l1="Foo", copyright="Someone", isbn="123")

        self.assertEqual(score_field_sets(correct, discovered), 67)

    def test_unknown_correct_fields_are_ignored(self) -> None:
        correct = _set(title_l1="Foo")
        discovered = _set(title_l1="Foo", author="Unexpected", isbn="999")

        self.assertEqual(score_field_sets(correct, discovered), 100)

    def test_no_real_content_in_correct_set_cannot_be_scored(self) -> None:
        self.assertIsNone(score_field_sets(_set(), _set(title_l1="Foo")))
        self.assertIsNone(score_field_sets(_set(copyright="empty"), _set(copyright="empty")))

    def test_percentage_of_all_unknown_set_is_zero(self) -> None:
        self.assertEqual(percentage_correct(_set(), _set(title_l1="Foo")), 0)

    def test_half_up_rounding(self) -> None:
        self.assertEqual(round_half_up(12.5), 13)
        self.assertEqual(round_half_up(62.5), 63)
        self.assertEqual(round_half_up(66.666), 67)
        self.assertEqual(round_half_up(33.333), 33)


if __name__ == "__main__":
    unittest.main()
