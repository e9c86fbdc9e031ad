"""ORM models package exports."""

from app.models.book_input import BookInput
from app.models.field_set import FieldSet
from app.models.prompt import Prompt
from app.models.run import Run

__all__ = [
    "BookInput",
    "FieldSet",
    "Prompt",
    "Run",
]
