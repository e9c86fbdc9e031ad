"""Run ORM model."""

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class Run(Base, IdMixin, CreatedAtMixin):
    """One execution of a prompt against a book input with a given model and temperature."""

    __tablename__ = "runs"

    prompt_id: Mapped[int | None] = mapped_column(
        ForeignKey("prompts.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )
    book_input_id: Mapped[int | None] = mapped_column(
        ForeignKey("book_inputs.id", ondelete="CASCADE"),
        index=True,
        nullable=True,
    )
    discovered_fields_id: Mapped[int | None] = mapped_column(
        ForeignKey("field_sets.id", ondelete="SET NULL"),
        nullable=True,
    )
    output: Mapped[str | None] = mapped_column(Text, nullable=True)
    temperature: Mapped[float | None] = mapped_column(Float, nullable=True)
    model: Mapped[str | None] = mapped_column(String(255), nullable=True)
    tokens_used: Mapped[int | None] = mapped_column(Integer, nullable=True)
    seconds_used: Mapped[float | None] = mapped_column(Float, nullable=True)
    finish_reason: Mapped[str | None] = mapped_column(String(64), nullable=True)
    human_tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
