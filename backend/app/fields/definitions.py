"""Static table of extractable book metadata fields."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class FieldKey(str, Enum):
    """Canonical storage identifier for every extractable field."""

    TITLE_L1 = "title_l1"
    TITLE_L2 = "title_l2"
    COPYRIGHT = "copyright"
    LICENSE_URL = "license_url"
    ISBN = "isbn"
    LICENSE_DESCRIPTION = "license_description"
    LICENSE_NOTES = "license_notes"
    ORIGINAL_COPYRIGHT = "original_copyright"
    SMALL_COVER_CREDITS = "small_cover_credits"
    TOPIC = "topic"
    CREDITS = "credits"
    VERSION_ACKNOWLEDGMENTS = "version_acknowledgments"
    ORIGINAL_CONTRIBUTIONS = "original_contributions"
    ORIGINAL_ACKNOWLEDGMENTS = "original_acknowledgments"
    FUNDING = "funding"
    COUNTRY = "country"
    PROVINCE = "province"
    DISTRICT = "district"
    AUTHOR = "author"
    ILLUSTRATOR = "illustrator"
    PUBLISHER = "publisher"
    ORIGINAL_PUBLISHER = "original_publisher"


def derive_label(key: str) -> str:
    """Turn ``license_url`` or ``licenseUrl`` into ``License Url``."""

    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", key).replace("_", " ")
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


@dataclass(frozen=True, slots=True)
class FieldDefinition:
    """How one field is named in storage, in model output, and on screen.

    ``occurrence`` is set for markers that legitimately repeat in one document:
    it selects the n-th (0-based) occurrence of ``markdown_key``.
    """

    key: FieldKey
    markdown_key: str = ""
    label: str = ""
    occurrence: int | None = None

    def __post_init__(self) -> None:
        if not self.markdown_key:
            object.__setattr__(self, "markdown_key", self.key.value)
        if not self.label:
            object.__setattr__(self, "label", derive_label(self.key.value))

    @property
    def db_key(self) -> str:
        return self.key.value


FIELD_DEFINITIONS: tuple[FieldDefinition, ...] = (
    FieldDefinition(FieldKey.TITLE_L1, markdown_key="bookTitle", label="Title L1", occurrence=0),
    FieldDefinition(FieldKey.TITLE_L2, markdown_key="bookTitle", label="Title L2", occurrence=1),
    FieldDefinition(FieldKey.COPYRIGHT),
    FieldDefinition(FieldKey.LICENSE_URL, markdown_key="licenseUrl", label="License URL"),
    FieldDefinition(FieldKey.ISBN, label="ISBN"),
    FieldDefinition(FieldKey.LICENSE_DESCRIPTION, markdown_key="licenseDescription"),
    FieldDefinition(FieldKey.LICENSE_NOTES, markdown_key="licenseNotes"),
    FieldDefinition(FieldKey.ORIGINAL_COPYRIGHT, markdown_key="originalCopyright"),
    FieldDefinition(FieldKey.SMALL_COVER_CREDITS, markdown_key="smallCoverCredits"),
    FieldDefinition(FieldKey.TOPIC),
    FieldDefinition(FieldKey.CREDITS),
    FieldDefinition(FieldKey.VERSION_ACKNOWLEDGMENTS, markdown_key="versionAcknowledgments"),
    FieldDefinition(FieldKey.ORIGINAL_CONTRIBUTIONS, markdown_key="originalContributions"),
    FieldDefinition(FieldKey.ORIGINAL_ACKNOWLEDGMENTS, markdown_key="originalAcknowledgments"),
    FieldDefinition(FieldKey.FUNDING),
    FieldDefinition(FieldKey.COUNTRY),
    FieldDefinition(FieldKey.PROVINCE),
    FieldDefinition(FieldKey.DISTRICT),
    FieldDefinition(FieldKey.AUTHOR),
    FieldDefinition(FieldKey.ILLUSTRATOR),
    FieldDefinition(FieldKey.PUBLISHER),
    FieldDefinition(FieldKey.ORIGINAL_PUBLISHER, markdown_key="originalPublisher"),
)

_DEFINITIONS_BY_KEY: dict[FieldKey, FieldDefinition] = {}
for _definition in FIELD_DEFINITIONS:
    if _definition.key in _DEFINITIONS_BY_KEY:
        raise RuntimeError(f"Duplicate field definition: {_definition.db_key}")
    _DEFINITIONS_BY_KEY[_definition.key] = _definition
if set(_DEFINITIONS_BY_KEY) != set(FieldKey):
    raise RuntimeError("Every FieldKey needs exactly one FieldDefinition")


def get_field_definition(key: FieldKey | str) -> FieldDefinition:
    """Return the definition for a key; raises ``ValueError`` on unknown keys."""

    return _DEFINITIONS_BY_KEY[FieldKey(key)]

