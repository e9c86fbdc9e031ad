"""initial prompt lab schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:01
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

FIELD_COLUMNS = (
    "title_l1",
    "title_l2",
    "copyright",
    "license_url",
    "isbn",
    "license_description",
    "license_notes",
    "original_copyright",
    "small_cover_credits",
    "topic",
    "credits",
    "version_acknowledgments",
    "original_contributions",
    "original_acknowledgments",
    "funding",
    "country",
    "province",
    "district",
    "author",
    "illustrator",
    "publisher",
    "original_publisher",
)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False)


def upgrade() -> None:
    op.create_table(
        "field_sets",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        *(sa.Column(name, sa.Text(), nullable=True) for name in FIELD_COLUMNS),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_field_sets_created_at", "field_sets", ["created_at"], unique=False)

    op.create_table(
        "prompts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("prompt_text", sa.Text(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_prompts_created_at", "prompts", ["created_at"], unique=False)

    op.create_table(
        "book_inputs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("label", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("ocr_markdown", sa.Text(), nullable=True),
        sa.Column("reference_markdown", sa.Text(), nullable=True),
        sa.Column("correct_fields_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["correct_fields_id"], ["field_sets.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_book_inputs_created_at", "book_inputs", ["created_at"], unique=False)
    op.create_index("ix_book_inputs_correct_fields_id", "book_inputs", ["correct_fields_id"], unique=False)

    op.create_table(
        "runs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _created_at(),
        sa.Column("prompt_id", sa.Integer(), nullable=True),
        sa.Column("book_input_id", sa.Integer(), nullable=True),
        sa.Column("discovered_fields_id", sa.Integer(), nullable=True),
        sa.Column("output", sa.Text(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("model", sa.String(length=255), nullable=True),
        sa.Column("tokens_used", sa.Integer(), nullable=True),
        sa.Column("seconds_used", sa.Float(), nullable=True),
        sa.Column("finish_reason", sa.String(length=64), nullable=True),
        sa.Column("human_tags", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["prompt_id"], ["prompts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["book_input_id"], ["book_inputs.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["discovered_fields_id"], ["field_sets.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_runs_created_at", "runs", ["created_at"], unique=False)
    op.create_index("ix_runs_prompt_id", "runs", ["prompt_id"], unique=False)
    op.create_index("ix_runs_book_input_id", "runs", ["book_input_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_runs_book_input_id", table_name="runs")
    op.drop_index("ix_runs_prompt_id", table_name="runs")
    op.drop_index("ix_runs_created_at", table_name="runs")
    op.drop_table("runs")
    op.drop_index("ix_book_inputs_correct_fields_id", table_name="book_inputs")
    op.drop_index("ix_book_inputs_created_at", table_name="book_inputs")
    op.drop_table("book_inputs")
    op.drop_index("ix_prompts_created_at", table_name="prompts")
    op.drop_table("prompts")
    op.drop_index("ix_field_sets_created_at", table_name="field_sets")
    op.drop_table("field_sets")
