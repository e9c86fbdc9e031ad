"""Extract tagged field values from model-annotated markdown.

Model output marks each value with an HTML comment such as
``<!-- field="copyright" -->``. A value runs from the end of its marker to the
nearest following boundary: another ``<!--`` opening, a markdown image, or the
end of the document.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from app.fields.definitions import FIELD_DEFINITIONS, FieldKey
from app.fields.values import FieldValue, FieldValueSet

_COMMENT_OPEN = "<!--"
_COMMENT_CLOSE = "-->"
_IMAGE_OPEN = "!["
_FIELD_ATTR_RE = re.compile(r'field="([^"]*)"', re.IGNORECASE)

_HEADER_RE = re.compile(r"^[ \t]{0,3}#{1,6}(?:[ \t]+|$)", re.MULTILINE)
_INLINE_LINK_RE = re.compile(r"\[([^\[\]]*)\]\([^()\s]*(?:\s+\"[^\"]*\")?\)")
_REFERENCE_LINK_RE = re.compile(r"\[([^\[\]]*)\]\[[^\[\]]*\]")
_EMPHASIS_STAR_RE = re.compile(r"\*+")
_EMPHASIS_UNDERSCORE_RE = re.compile(r"(?<![^\W_])_+|_+(?![^\W_])")
_STRIKETHROUGH_RE = re.compile(r"~~")
_INLINE_CODE_RE = re.compile(r"`+")


@dataclass(frozen=True, slots=True)
class _Boundary:
    start: int
    end: int
    marker_name: str | None = None


def _image_end(markdown: str, start: int) -> int | None:
    """Return the end offset of ``![alt](src)`` starting at ``start``, if it is one."""

    alt_close = markdown.find("]", start + 2)
    if alt_close == -1 or "\n\n" in markdown[start:alt_close]:
        return None
    if not markdown.startswith("(", alt_close + 1):
        return None
    src_close = markdown.find(")", alt_close + 2)
    if src_close == -1 or "\n" in markdown[alt_close + 2 : src_close]:
        return None
    return src_close + 1


def _comment_boundary(markdown: str, start: int) -> _Boundary:
    """Classify a ``<!--`` opening as a field marker or a plain boundary."""

    tag_close = markdown.find(">", start + len(_COMMENT_OPEN))
    if tag_close == -1 or not markdown.startswith(_COMMENT_CLOSE, tag_close - 2):
        return _Boundary(start=start, end=start + len(_COMMENT_OPEN))
    body = markdown[start + len(_COMMENT_OPEN) : tag_close - 2]
    match = _FIELD_ATTR_RE.search(body)
    name = match.group(1).casefold() if match else None
    return _Boundary(start=start, end=tag_close + 1, marker_name=name)


def scan_boundaries(markdown: str) -> list[_Boundary]:
    """Single left-to-right pass collecting comment openings and images in order."""

    boundaries: list[_Boundary] = []
    position = 0
    length = len(markdown)
    while position < length:
        next_comment = markdown.find(_COMMENT_OPEN, position)
        next_image = markdown.find(_IMAGE_OPEN, position)
        if next_comment == -1 and next_image == -1:
            break
        if next_image == -1 or (next_comment != -1 and next_comment < next_image):
            boundary = _comment_boundary(markdown, next_comment)
            boundaries.append(boundary)
            position = boundary.end
            continue
        image_end = _image_end(markdown, next_image)
        if image_end is None:
            position = next_image + len(_IMAGE_OPEN)
            continue
        boundaries.append(_Boundary(start=next_image, end=image_end))
        position = image_end
    return boundaries


def _value_regions(markdown: str, marker_name: str) -> list[str]:
    wanted = marker_name.casefold()
    boundaries = scan_boundaries(markdown)
    regions: list[str] = []
    for index, boundary in enumerate(boundaries):
        if boundary.marker_name != wanted:
            continue
        region_end = boundaries[index + 1].start if index + 1 < len(boundaries) else len(markdown)
        regions.append(markdown[boundary.end : region_end])
    return regions


def _clean_once(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        text = _INLINE_LINK_RE.sub(r"\1", text)
        text = _REFERENCE_LINK_RE.sub(r"\1", text)
    text = _HEADER_RE.sub("", text)
    text = _STRIKETHROUGH_RE.sub("", text)
    text = _INLINE_CODE_RE.sub("", text)
    text = _EMPHASIS_STAR_RE.sub("", text)
    text = _EMPHASIS_UNDERSCORE_RE.sub("", text)
    return text.strip()


def clean_markdown(text: str) -> str:
    """Strip headers, emphasis, strikethrough, inline code and link syntax, then trim.

    Each pass only removes characters, so iterating to a fixed point terminates
    and makes the result stable under re-cleaning.
    """

    cleaned = text.strip()
    while True:
        next_pass = _clean_once(cleaned)
        if next_pass == cleaned:
            return cleaned
        cleaned = next_pass


def extract_field(markdown: str, marker_name: str) -> str:
    """Return the cleaned value after the first ``field="marker_name"`` marker, or ``""``."""

    if not markdown:
        return ""
    regions = _value_regions(markdown, marker_name)
    if not regions:
        return ""
    return clean_markdown(regions[0])


def extract_multiple_fields(markdown: str, marker_name: str) -> list[str]:
    """Return every non-empty cleaned value for a repeatable marker, in document order."""

    if not markdown:
        return []
    values = [clean_markdown(region) for region in _value_regions(markdown, marker_name)]
    return [value for value in values if value]


def extract_field_values(markdown: str) -> FieldValueSet:
    """Extract every defined field; fields the model left out become the empty sentinel."""

    repeated: dict[str, list[str]] = {}
    values: dict[FieldKey, FieldValue] = {}
    for definition in FIELD_DEFINITIONS:
        if definition.occurrence is None:
            values[definition.key] = FieldValue.of(extract_field(markdown, definition.markdown_key))
            continue
        if definition.markdown_key not in repeated:
            repeated[definition.markdown_key] = extract_multiple_fields(markdown, definition.markdown_key)
        found = repeated[definition.markdown_key]
        text = found[definition.occurrence] if definition.occurrence < len(found) else ""
        values[definition.key] = FieldValue.of(text)
    return FieldValueSet(values)
