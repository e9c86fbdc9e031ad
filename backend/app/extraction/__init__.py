"""Field extraction from model-annotated markdown."""

from app.extraction.field_extractor import (
    clean_markdown,
    extract_field,
    extract_field_values,
    extract_multiple_fields,
)

__all__ = ["clean_markdown", "extract_field", "extract_field_values", "extract_multiple_fields"]
