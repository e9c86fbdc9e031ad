"""Field value set ORM model."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, CreatedAtMixin, IdMixin


class FieldSet(Base, IdMixin, CreatedAtMixin):
    """One row of field values, owned by a book input (correct) or a run (discovered).

    Column names match ``FieldKey`` values. ``None`` means never evaluated and
    the literal ``"empty"`` means evaluated with nothing found.
    """

    __tablename__ = "field_sets"

    title_l1: Mapped[str | None] = mapped_column(Text, nullable=True)
    title_l2: Mapped[str | None] = mapped_column(Text, nullable=True)
    copyright: Mapped[str | None] = mapped_column(Text, nullable=True)
    license_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    isbn: Mapped[str | None] = mapped_column(Text, nullable=True)
    license_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    license_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_copyright: Mapped[str | None] = mapped_column(Text, nullable=True)
    small_cover_credits: Mapped[str | None] = mapped_column(Text, nullable=True)
    topic: Mapped[str | None] = mapped_column(Text, nullable=True)
    credits: Mapped[str | None] = mapped_column(Text, nullable=True)
    version_acknowledgments: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_contributions: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_acknowledgments: Mapped[str | None] = mapped_column(Text, nullable=True)
    funding: Mapped[str | None] = mapped_column(Text, nullable=True)
    country: Mapped[str | None] = mapped_column(Text, nullable=True)
    province: Mapped[str | None] = mapped_column(Text, nullable=True)
    district: Mapped[str | None] = mapped_column(Text, nullable=True)
    author: Mapped[str | None] = mapped_column(Text, nullable=True)
    illustrator: Mapped[str | None] = mapped_column(Text, nullable=True)
    publisher: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_publisher: Mapped[str | None] = mapped_column(Text, nullable=True)
