"""Book input ORM model."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class BookInput(Base, IdMixin, CreatedAtMixin):
    """OCR'd book front matter plus its human-curated correct field set."""

    __tablename__ = "book_inputs"

    label: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ocr_markdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    reference_markdown: Mapped[str | None] = mapped_column(Text, nullable=True)
    correct_fields_id: Mapped[int | None] = mapped_column(
        ForeignKey("field_sets.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
