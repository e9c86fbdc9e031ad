"""SQLAlchemy metadata registry import for Alembic."""

from app.models import BookInput, FieldSet, Prompt, Run
from app.models.base import Base

__all__ = ["Base", "BookInput", "FieldSet", "Prompt", "Run"]
