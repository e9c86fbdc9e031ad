"""Book input CRUD services."""

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.models.book_input import BookInput
from app.models.field_set import FieldSet
from app.models.run import Run
from app.schemas.book_input import BookInputCreate, BookInputUpdate


def create_book_input(db: Session, payload: BookInputCreate) -> BookInput:
    """Insert a book input; its correct field set is created on first edit."""

    book_input = BookInput(
        label=payload.label,
        ocr_markdown=payload.ocr_markdown,
        reference_markdown=payload.reference_markdown,
        notes=payload.notes,
    )
    db.add(book_input)
    db.commit()
    db.refresh(book_input)
    return book_input


def get_book_input(db: Session, book_input_id: int) -> BookInput | None:
    return db.scalar(select(BookInput).where(BookInput.id == book_input_id))


def list_book_inputs(db: Session) -> list[BookInput]:
    """List book inputs alphabetically by label, unlabeled last."""

    stmt = select(BookInput).order_by(
        BookInput.label.is_(None).asc(),
        BookInput.label.asc(),
        BookInput.id.asc(),
    )
    return list(db.scalars(stmt).all())


def update_book_input(db: Session, book_input_id: int, payload: BookInputUpdate) -> BookInput | None:
    """Update the fields present in ``payload``."""

    book_input = get_book_input(db, book_input_id)
    if book_input is None:
        return None
    for name in ("label", "ocr_markdown", "reference_markdown", "notes"):
        if name in payload.model_fields_set:
            setattr(book_input, name, getattr(payload, name))
    db.commit()
    db.refresh(book_input)
    return book_input


def delete_book_input(db: Session, book_input_id: int) -> bool:
    """Delete a book input, its runs, and the field sets they own."""

    book_input = get_book_input(db, book_input_id)
    if book_input is None:
        return False
    runs = list(db.scalars(select(Run).where(Run.book_input_id == book_input_id)).all())
    owned_field_set_ids = [run.discovered_fields_id for run in runs if run.discovered_fields_id is not None]
    if book_input.correct_fields_id is not None:
        owned_field_set_ids.append(book_input.correct_fields_id)

    db.execute(delete(Run).where(Run.book_input_id == book_input_id))
    db.delete(book_input)
    db.flush()
    if owned_field_set_ids:
        db.execute(delete(FieldSet).where(FieldSet.id.in_(owned_field_set_ids)))
    db.commit()
    return True
