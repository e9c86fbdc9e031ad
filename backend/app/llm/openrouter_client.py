"""OpenRouter chat completions client (single-shot and streamed)."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from http import client as http_client
from typing import Any, Protocol
from urllib import error as urllib_error
from urllib import request as urllib_request

from app.config import get_settings

OUTPUT_MULTIPLIER = 3
ANNOTATION_MULTIPLIER = 1
THINKING_MULTIPLIER = 6
USER_CONTENT_PREFIX = "Here is the Markdown content:\n\n"


class ModelInvocationError(RuntimeError):
    """Raised when the model provider is misconfigured or a call fails."""


class RunCancelledError(RuntimeError):
    """Raised when a user stops a streamed run before it finishes."""


@dataclass(slots=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None) -> "TokenUsage | None":
        if not isinstance(payload, dict):
            return None
        prompt_tokens = int(payload.get("prompt_tokens") or 0)
        completion_tokens = int(payload.get("completion_tokens") or 0)
        total_tokens = int(payload.get("total_tokens") or prompt_tokens + completion_tokens)
        return cls(prompt_tokens, completion_tokens, total_tokens)


@dataclass(slots=True)
class CompletionRequest:
    """Everything the provider needs for one annotation call."""

    system_prompt: str
    user_content: str
    model: str
    temperature: float = 0.0
    max_tokens: int | None = None

    def to_payload(self, *, stream: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": self.user_content},
            ],
        }
        if self.max_tokens is not None:
            payload["max_tokens"] = self.max_tokens
        if stream:
            payload["stream"] = True
            payload["usage"] = {"include": True}
        return payload


@dataclass(slots=True)
class CompletionResult:
    text: str
    finish_reason: str | None = None
    usage: TokenUsage | None = None


def compute_max_tokens(markdown: str) -> int:
    """Token budget scaled to input size; minority-language text tokenizes poorly."""

    return len(markdown) * (OUTPUT_MULTIPLIER + ANNOTATION_MULTIPLIER + THINKING_MULTIPLIER)


def build_completion_request(
    prompt_text: str,
    markdown: str,
    model: str,
    temperature: float = 0.0,
) -> CompletionRequest:
    """Wrap OCR markdown as the user turn and the prompt as the system instruction."""

    return CompletionRequest(
        system_prompt=prompt_text,
        user_content=f"{USER_CONTENT_PREFIX}{markdown}",
        model=model,
        temperature=temperature,
        max_tokens=compute_max_tokens(markdown),
    )


class CompletionStream:
    """Iterates text deltas; ``finish_reason`` and ``usage`` are set as the stream ends.

    ``cancel_token`` is checked before each event read and again before a chunk
    is handed out, so nothing read after a stop reaches the caller. Once set, the
    underlying response is closed and ``RunCancelledError`` raised.
    """

    def __init__(
        self,
        events: Iterator[dict[str, Any]],
        *,
        cancel_token: threading.Event | None = None,
        on_close: Callable[[], None] | None = None,
    ) -> None:
        self._events = events
        self._cancel_token = cancel_token
        self._on_close = on_close
        self.finish_reason: str | None = None
        self.usage: TokenUsage | None = None

    def __iter__(self) -> Iterator[str]:
        try:
            while True:
                self._check_cancelled()
                try:
                    event = next(self._events)
                except StopIteration:
                    return
                self._check_cancelled()
                text = self._consume(event)
                if text:
                    yield text
        finally:
            self.close()

    def close(self) -> None:
        if self._on_close is not None:
            on_close, self._on_close = self._on_close, None
            on_close()

    def _check_cancelled(self) -> None:
        if self._cancel_token is not None and self._cancel_token.is_set():
            raise RunCancelledError("Stream aborted")

    def _consume(self, event: dict[str, Any]) -> str:
        try:
            return self._read_event(event)
        except (AttributeError, TypeError, ValueError) as exc:
            self.finish_reason = "error"
            raise ModelInvocationError("OpenRouter returned a malformed stream event") from exc

    def _read_event(self, event: dict[str, Any]) -> str:
        error_payload = event.get("error")
        if error_payload:
            message = error_payload.get("message") if isinstance(error_payload, dict) else str(error_payload)
            self.finish_reason = "error"
            raise ModelInvocationError(f"OpenRouter stream error: {message}")
        usage = TokenUsage.from_payload(event.get("usage"))
        if usage is not None:
            self.usage = usage
        choices = event.get("choices") or []
        if not choices:
            return ""
        choice = choices[0]
        if choice.get("finish_reason"):
            self.finish_reason = str(choice["finish_reason"])
        delta = choice.get("delta") or {}
        content = delta.get("content")
        return content if isinstance(content, str) else ""


class ModelClient(Protocol):
    """Protocol for pluggable text-generation clients."""

    def complete(self, request: CompletionRequest) -> CompletionResult:
        """Return the final generated text."""

    def stream(
        self,
        request: CompletionRequest,
        cancel_token: threading.Event | None = None,
    ) -> CompletionStream:
        """Return an incremental stream of generated text."""


def iter_sse_events(lines: Iterator[bytes]) -> Iterator[dict[str, Any]]:
    """Decode ``data:`` lines of a server-sent event stream into JSON payloads.

    Keep-alive comment lines come through as empty events so consumers regain
    control between data lines.
    """

    for raw_line in lines:
        line = raw_line.decode("utf-8", errors="replace").strip()
        if line.startswith(":"):
            yield {}
            continue
        if not line.startswith("data:"):
            continue
        data = line[len("data:") :].strip()
        if data == "[DONE]":
            return
        try:
            decoded = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ModelInvocationError("OpenRouter stream returned a non-JSON event") from exc
        if isinstance(decoded, dict):
            yield decoded


@dataclass(slots=True)
class OpenRouterClient:
    """Minimal OpenRouter client using stdlib HTTP."""

    api_key: str
    base_url: str = "https://openrouter.ai/api/v1"
    timeout_seconds: int = 600
    app_title: str | None = None
    referer: str | None = None
    extra_headers: dict[str, str] = field(default_factory=dict)

    def complete(self, request: CompletionRequest) -> CompletionResult:
        """Call the provider once and return the final text."""

        req = self._build_request(request.to_payload(stream=False))
        try:
            with urllib_request.urlopen(req, timeout=self.timeout_seconds) as resp:
                raw = resp.read().decode("utf-8")
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise ModelInvocationError(f"OpenRouter HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise ModelInvocationError(f"OpenRouter request failed: {exc.reason}") from exc

        try:
            decoded = json.loads(raw)
            choice = decoded["choices"][0]
            content = choice["message"]["content"]
            return CompletionResult(
                text=content if isinstance(content, str) else "",
                finish_reason=choice.get("finish_reason"),
                usage=TokenUsage.from_payload(decoded.get("usage")),
            )
        except (KeyError, IndexError, TypeError, json.JSONDecodeError) as exc:
            raise ModelInvocationError("OpenRouter returned an unexpected completion response") from exc

    def stream(
        self,
        request: CompletionRequest,
        cancel_token: threading.Event | None = None,
    ) -> CompletionStream:
        """Open a streamed completion; text arrives as the caller iterates."""

        req = self._build_request(request.to_payload(stream=True), accept="text/event-stream")
        try:
            resp = urllib_request.urlopen(req, timeout=self.timeout_seconds)
        except urllib_error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace")
            raise ModelInvocationError(f"OpenRouter HTTP {exc.code}: {detail}") from exc
        except urllib_error.URLError as exc:
            raise ModelInvocationError(f"OpenRouter request failed: {exc.reason}") from exc
        return CompletionStream(
            _guard_transport(iter_sse_events(iter(resp))),
            cancel_token=cancel_token,
            on_close=resp.close,
        )

    def _build_request(self, payload: dict[str, Any], accept: str = "application/json") -> urllib_request.Request:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": accept,
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.app_title:
            headers["X-Title"] = self.app_title
        headers.update(self.extra_headers)
        return urllib_request.Request(
            url=f"{self.base_url.rstrip('/')}/chat/completions",
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers=headers,
        )


def _guard_transport(events: Iterator[dict[str, Any]]) -> Iterator[dict[str, Any]]:
    try:
        yield from events
    except (OSError, http_client.HTTPException) as exc:
        raise ModelInvocationError(f"OpenRouter stream interrupted: {exc}") from exc


def get_default_model_client() -> ModelClient:
    """Return the configured OpenRouter client."""

    settings = get_settings()
    if not settings.openrouter_api_key:
        raise ModelInvocationError(
            "OPENROUTER_API_KEY is not configured. Set it in backend/.env before running prompts."
        )
    return OpenRouterClient(
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        timeout_seconds=settings.openrouter_timeout_seconds,
        app_title=settings.openrouter_app_title,
        referer=settings.openrouter_referer,
    )
