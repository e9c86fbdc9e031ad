"""Unit tests for marker-based field extraction and markdown cleaning."""

from __future__ import annotations

import unittest

from app.extraction.field_extractor import (
    clean_markdown,
    extract_field,
    extract_field_values,
    extract_multiple_fields,
    scan_boundaries,
)
from app.fields import FIELD_DEFINITIONS, FieldKey, FieldValue, FieldValueKind


class ExtractFieldTests(unittest.TestCase):
    def test_value_runs_until_next_marker(self) -> None:
        markdown = '<!-- field="copyright" -->Copyright 2020 Foo\n<!-- field="isbn" -->978-1'

        self.assertEqual(extract_field(markdown, "copyright"), "Copyright 2020 Foo")
        self.assertEqual(extract_field(markdown, "isbn"), "978-1")

    def test_absent_marker_returns_empty_string(self) -> None:
        markdown = '<!-- field="copyright" -->Copyright 2020 Foo'

        self.assertEqual(extract_field(markdown, "author"), "")
        self.assertEqual(extract_field("", "author"), "")
        self.assertEqual(extract_field("no markers at all", "author"), "")

    def test_value_stops_at_markdown_image(self) -> None:
        markdown = '<!-- field="author" -->Jane Doe\n![cover](cover.png)\nTrailing text'

        self.assertEqual(extract_field(markdown, "author"), "Jane Doe")

    def test_value_stops_at_plain_comment(self) -> None:
        markdown = '<!-- field="author" -->Jane Doe<!-- page break -->Someone else'

        self.assertEqual(extract_field(markdown, "author"), "Jane Doe")

    def test_last_marker_runs_to_end_of_document(self) -> None:
        markdown = 'Intro\n<!-- field="publisher" -->  Pratham Books  \n\n'

        self.assertEqual(extract_field(markdown, "publisher"), "Pratham Books")

    def test_marker_name_and_attribute_are_case_insensitive(self) -> None:
        markdown = '<!-- FIELD="Author" data-x="1" -->Jane Doe'

        self.assertEqual(extract_field(markdown, "author"), "Jane Doe")
        self.assertEqual(extract_field(markdown, "AUTHOR"), "Jane Doe")

    def test_unterminated_comment_is_a_boundary_not_a_marker(self) -> None:
        markdown = '<!-- field="author" -->Jane Doe <!-- field="isbn" 978'

        self.assertEqual(extract_field(markdown, "author"), "Jane Doe")
        self.assertEqual(extract_field(markdown, "isbn"), "")

    def test_bracket_without_image_syntax_is_not_a_boundary(self) -> None:
        markdown = '<!-- field="credits" -->Thanks to ![everyone who helped'

        self.assertEqual(extract_field(markdown, "credits"), "Thanks to ![everyone who helped")

    def test_first_occurrence_wins(self) -> None:
        markdown = '<!-- field="topic" -->Animals<!-- field="topic" -->Farms'

        self.assertEqual(extract_field(markdown, "topic"), "Animals")

    def test_scanner_reports_boundaries_in_document_order(self) -> None:
        markdown = 'a<!-- field="x" -->b![i](j.png)c<!-- other -->d'

        boundaries = scan_boundaries(markdown)

        self.assertEqual([boundary.marker_name for boundary in boundaries], ["x", None, None])
        self.assertEqual([boundary.start for boundary in boundaries], sorted(b.start for b in boundaries))


class ExtractMultipleFieldsTests(unittest.TestCase):
    def test_returns_non_empty_values_in_document_order(self) -> None:
        markdown = (
            '<!-- field="bookTitle" -->First\n'
            '<!-- field="bookTitle" -->\n'
            '<!-- field="author" -->Jane\n'
            '<!-- field="bookTitle" -->**Second**'
        )

        self.assertEqual(extract_multiple_fields(markdown, "bookTitle"), ["First", "Second"])

    def test_no_occurrences_returns_empty_list(self) -> None:
        self.assertEqual(extract_multiple_fields("", "bookTitle"), [])
        self.assertEqual(extract_multiple_fields("plain text", "bookTitle"), [])


class CleanMarkdownTests(unittest.TestCase):
    def test_strips_formatting_and_keeps_link_text(self) -> None:
        text = "## **Bold** _it_ ~~gone~~ `code` [link](http://example.com)"

        self.assertEqual(clean_markdown(text), "Bold it gone code link")

    def test_keeps_intra_word_underscores(self) -> None:
        self.assertEqual(clean_markdown("file_name_here"), "file_name_here")

    def test_reference_links_and_nested_links(self) -> None:
        self.assertEqual(clean_markdown("[text][ref]"), "text")
        self.assertEqual(clean_markdown("[[inner](a)](b)"), "inner")

    def test_cleaning_is_idempotent(self) -> None:
        samples = [
            "",
            "   ",
            "# Title",
            "### ## Nested header",
            "***bold italic***",
            "__under__ _score_",
            "`a` ``b``",
            "[x](y) and [[z](w)](v)",
            "\n\n## Heading\n\nBody *text*\n",
            "# \n#",
            "snake_case and _leading and trailing_",
            "~~~strike~~~",
        ]
        for sample in samples:
            with self.subTest(sample=sample):
                once = clean_markdown(sample)
                self.assertEqual(clean_markdown(once), once)


class ExtractFieldValuesTests(unittest.TestCase):
    def test_two_title_markers_fill_both_title_slots(self) -> None:
        markdown = '<!-- field="bookTitle" -->Title One\n<!-- field="bookTitle" -->Title Two\n'

        values = extract_field_values(markdown)

        self.assertEqual(values[FieldKey.TITLE_L1], FieldValue.of("Title One"))
        self.assertEqual(values[FieldKey.TITLE_L2], FieldValue.of("Title Two"))
        for definition in FIELD_DEFINITIONS:
            if definition.key in (FieldKey.TITLE_L1, FieldKey.TITLE_L2):
                continue
            with self.subTest(field=definition.db_key):
                self.assertIs(values[definition.key].kind, FieldValueKind.EMPTY)

    def test_camel_case_marker_maps_to_snake_case_key(self) -> None:
        markdown = '<!-- field="licenseUrl" -->[CC BY](https://creativecommons.org/licenses/by/4.0/)'

        values = extract_field_values(markdown)

        self.assertEqual(values[FieldKey.LICENSE_URL].text, "CC BY")

    def test_marker_with_only_formatting_is_empty(self) -> None:
        values = extract_field_values('<!-- field="author" -->**  **')

        self.assertIs(values[FieldKey.AUTHOR].kind, FieldValueKind.EMPTY)
        self.assertEqual(values[FieldKey.AUTHOR].to_stored(), "empty")


if __name__ == "__main__":
    unittest.main()
