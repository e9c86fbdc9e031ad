"""Process-wide cache of models available through OpenRouter."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Any
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ModelInfo:
    id: str
    name: str


def fetch_openrouter_models(base_url: str, timeout_seconds: int = 30) -> list[dict[str, Any]]:
    """Fetch the public model listing; the endpoint needs no API key."""

    req = urllib_request.Request(url=f"{base_url.rstrip('/')}/models", method="GET")
    with urllib_request.urlopen(req, timeout=timeout_seconds) as resp:
        decoded = json.loads(resp.read().decode("utf-8"))
    rows = decoded.get("data") if isinstance(decoded, dict) else None
    if not isinstance(rows, list):
        raise ValueError("OpenRouter model listing has no 'data' array")
    return rows


class ModelCatalog:
    """Lazily populated on first successful fetch and never invalidated afterwards."""

    def __init__(self, fetcher: Callable[[], list[dict[str, Any]]]) -> None:
        self._fetcher = fetcher
        self._models: list[ModelInfo] | None = None
        self._lock = Lock()

    @property
    def is_loaded(self) -> bool:
        return self._models is not None

    def get_models(self) -> list[ModelInfo]:
        """Return cached models sorted by display name; an empty list if the fetch fails."""

        if self._models is not None:
            return list(self._models)
        with self._lock:
            if self._models is None:
                try:
                    rows = self._fetcher()
                except (urllib_error.URLError, OSError, ValueError) as exc:
                    logger.warning("models.fetch_failed error=%s", exc)
                    return []
                models = [
                    ModelInfo(id=str(row["id"]), name=str(row.get("name") or row["id"]))
                    for row in rows
                    if isinstance(row, dict) and row.get("id")
                ]
                models.sort(key=lambda model: model.name.casefold())
                self._models = models
                logger.info("models.cached count=%d", len(models))
        return list(self._models)


@lru_cache
def get_model_catalog() -> ModelCatalog:
    """Return the process-wide catalog."""

    settings = get_settings()
    return ModelCatalog(lambda: fetch_openrouter_models(settings.openrouter_base_url))
