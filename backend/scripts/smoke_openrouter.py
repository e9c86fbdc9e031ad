"""Stream one real OpenRouter completion over demo markdown and print the extracted fields.

Usage (from repo root):
    python backend/scripts/smoke_openrouter.py

Usage (from backend/):
    python scripts/smoke_openrouter.py [model-id]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.config import get_settings
from app.extraction.field_extractor import extract_field_values
from app.llm.openrouter_client import build_completion_request, get_default_model_client
from scripts.seed_demo import DEMO_OCR_MARKDOWN, DEMO_PROMPT


def main() -> None:
    model = sys.argv[1] if len(sys.argv) > 1 else get_settings().default_model
    client = get_default_model_client()
    stream = client.stream(build_completion_request(DEMO_PROMPT, DEMO_OCR_MARKDOWN, model))
    output = "".join(stream)
    values = extract_field_values(output)
    print(
        json.dumps(
            {
                "model": model,
                "finish_reason": stream.finish_reason,
                "total_tokens": stream.usage.total_tokens if stream.usage else None,
                "fields": {key.value: value.to_stored() for key, value in values.items() if value.has_content},
            },
            indent=2,
        )
    )


if __name__ == "__main__":
    main()
