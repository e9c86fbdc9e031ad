"""Seed a demo book input, its correct fields and a starter prompt.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo --run
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import select

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db.session import SessionLocal
from app.models.book_input import BookInput
from app.schemas.book_input import BookInputCreate
from app.schemas.prompt import PromptCreate
from app.services.book_inputs import create_book_input, delete_book_input
from app.services.corrections import save_correct_fields
from app.services.prompts import create_prompt
from app.services.runs import execute_run


DEFAULT_LABEL = "demo-front-matter"

DEMO_OCR_MARKDOWN = """# The Little Red Hen

## Kuku Mdogo Mwekundu

![cover](cover.png)

Author: Jane Mwangi
Illustrator: Peter Otieno

Published by Pratham Books

Copyright (c) 2019 Pratham Books
This work is licensed under a Creative Commons Attribution 4.0 International License.
https://creativecommons.org/licenses/by/4.0/

ISBN 978-0-00-000000-0
"""

DEMO_CORRECT_FIELDS = {
    "title_l1": "The Little Red Hen",
    "title_l2": "Kuku Mdogo Mwekundu",
    "author": "Jane Mwangi",
    "illustrator": "Peter Otieno",
    "publisher": "Pratham Books",
    "copyright": "Copyright (c) 2019 Pratham Books",
    "license_url": "https://creativecommons.org/licenses/by/4.0/",
    "isbn": "ISBN 978-0-00-000000-0",
    "funding": "empty",
}

DEMO_PROMPT = """You annotate the front matter of a children's book.
Copy the markdown you are given unchanged, but put an HTML comment marker
immediately before each value you recognise, for example:

<!-- field="bookTitle" -->The Little Red Hen
<!-- field="author" -->Jane Mwangi

Use bookTitle once per language, and the markers author, illustrator,
publisher, copyright, licenseUrl, isbn, licenseDescription and funding.
"""


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed a demo book input and prompt.")
    parser.add_argument("--label", default=DEFAULT_LABEL, help=f"Book input label (default: {DEFAULT_LABEL})")
    parser.add_argument(
        "--no-reset",
        action="store_true",
        help="Keep existing book inputs with the same label.",
    )
    parser.add_argument(
        "--run",
        action="store_true",
        help="Also execute the prompt through OpenRouter (needs OPENROUTER_API_KEY).",
    )
    parser.add_argument("--model", default=None, help="Model id for --run (default: settings.default_model)")
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print a short summary."""

    args = parse_args()

    with SessionLocal() as db:
        if not args.no_reset:
            existing = db.scalars(select(BookInput.id).where(BookInput.label == args.label)).all()
            for book_input_id in existing:
                delete_book_input(db, book_input_id)

        book_input = create_book_input(db, BookInputCreate(label=args.label, ocr_markdown=DEMO_OCR_MARKDOWN))
        save_correct_fields(db, book_input.id, DEMO_CORRECT_FIELDS)
        prompt = create_prompt(db, PromptCreate(label="demo", prompt_text=DEMO_PROMPT, temperature=0.0))
        book_input_id, prompt_id = book_input.id, prompt.id

        print("Seed complete")
        print(f"book_input_id={book_input_id}")
        print(f"prompt_id={prompt_id}")

        if args.run:
            result = execute_run(db, book_input_id=book_input_id, prompt_id=prompt_id, model=args.model)
            print(f"run_id={result.run.id}")
            print(f"finish_reason={result.finish_reason}")
            print(f"tokens_used={result.run.tokens_used}")

    print()
    print("Inspect:")
    print(f"  GET /book-inputs/{book_input_id}/correct-fields")
    print(f"  GET /book-inputs/{book_input_id}/score")
    print(f"  GET /evaluation?prompt_id={prompt_id}")


if __name__ == "__main__":
    main()
