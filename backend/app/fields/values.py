"""Tagged field values and the per-record field value set."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from app.fields.definitions import FIELD_DEFINITIONS, FieldKey

# Stored marker for an evaluated field with no content. Extracted text that is
# literally "empty" shares the stored form and reads back as EMPTY.
EMPTY_SENTINEL = "empty"


class FieldValueKind(str, Enum):
    UNKNOWN = "unknown"
    EMPTY = "empty"
    VALUE = "value"


@dataclass(frozen=True, slots=True)
class FieldValue:
    """One field's state: never evaluated, evaluated-and-empty, or real content."""

    kind: FieldValueKind
    text: str = ""

    @classmethod
    def unknown(cls) -> "FieldValue":
        return cls(FieldValueKind.UNKNOWN)

    @classmethod
    def empty(cls) -> "FieldValue":
        return cls(FieldValueKind.EMPTY)

    @classmethod
    def of(cls, text: str | None) -> "FieldValue":
        """Wrap extracted text; blank text becomes the empty sentinel."""

        if text is None or not text.strip():
            return cls.empty()
        return cls(FieldValueKind.VALUE, text)

    @classmethod
    def from_stored(cls, raw: str | None) -> "FieldValue":
        if raw is None or not raw.strip():
            return cls.unknown()
        if raw == EMPTY_SENTINEL:
            return cls.empty()
        return cls(FieldValueKind.VALUE, raw)

    def to_stored(self) -> str | None:
        if self.kind is FieldValueKind.UNKNOWN:
            return None
        if self.kind is FieldValueKind.EMPTY:
            return EMPTY_SENTINEL
        return self.text

    @property
    def has_content(self) -> bool:
        return self.kind is FieldValueKind.VALUE

    @property
    def is_known(self) -> bool:
        return self.kind is not FieldValueKind.UNKNOWN

    def display_text(self) -> str:
        """Text shown in comparison tables; the sentinel is shown literally."""

        return self.to_stored() or ""

    def normalized(self) -> str:
        """Comparison form: trimmed and case-folded, empty for non-content."""

        if self.kind is not FieldValueKind.VALUE:
            return ""
        return self.text.strip().casefold()


class FieldValueSet(Mapping[FieldKey, FieldValue]):
    """Ordered mapping over every field definition; absent keys read as unknown."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[FieldKey, FieldValue] | None = None) -> None:
        provided = dict(values or {})
        self._values: dict[FieldKey, FieldValue] = {
            definition.key: provided.get(definition.key, FieldValue.unknown())
            for definition in FIELD_DEFINITIONS
        }

    def __getitem__(self, key: FieldKey) -> FieldValue:
        try:
            return self._values[FieldKey(key)]
        except ValueError as exc:
            raise KeyError(key) from exc

    def __iter__(self) -> Iterator[FieldKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        filled = {key.value: value.to_stored() for key, value in self._values.items() if value.is_known}
        return f"FieldValueSet({filled!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldValueSet):
            return NotImplemented
        return self._values == other._values

    def replace(self, key: FieldKey, value: FieldValue) -> "FieldValueSet":
        """Return a copy with one field changed."""

        updated = dict(self._values)
        updated[FieldKey(key)] = value
        return FieldValueSet(updated)

    def has_any_content(self) -> bool:
        return any(value.has_content for value in self._values.values())

    @classmethod
    def from_stored(cls, raw: Mapping[str, Any]) -> "FieldValueSet":
        """Build from a ``{db_key: str | None}`` mapping; unknown keys are ignored."""

        return cls(
            {
                definition.key: FieldValue.from_stored(raw.get(definition.db_key))
                for definition in FIELD_DEFINITIONS
            }
        )

    @classmethod
    def from_row(cls, row: Any) -> "FieldValueSet":
        """Build from an ORM ``FieldSet`` row (or anything with matching attributes)."""

        return cls(
            {
                definition.key: FieldValue.from_stored(getattr(row, definition.db_key, None))
                for definition in FIELD_DEFINITIONS
            }
        )

    def to_stored(self) -> dict[str, str | None]:
        return {key.value: value.to_stored() for key, value in self._values.items()}
