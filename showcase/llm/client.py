"""Chat-completion client with bounded retries."""

from __future__ import annotations

import json
import re
import time
from dataclasses import dataclass
from http.client import HTTPException
from typing import Callable, Dict, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..logging import get_logger
from ..prompting.builder import PromptMessage
from ..reporting import LoggingReporter, Reporter

_FENCED_HTML = re.compile(r"```html?\s*([\s\S]+?)```", re.IGNORECASE)
_DOCTYPE = re.compile(r"(<!DOCTYPE html[\s\S]+)", re.IGNORECASE)


# Errors that earn another attempt against the endpoint.
_RETRYABLE_ERRORS = (RuntimeError, OSError, ValueError, HTTPException)


class ModelCallFailure(RuntimeError):
    """Raised when every attempt against the model endpoint failed."""


@dataclass
class ChatRequest:
    """Represents a single HTTP call to the completion endpoint."""

    endpoint: str
    api_key: str
    payload: Dict[str, object]
    timeout: float


@dataclass(frozen=True)
class Completion:
    """Document extracted from a successful completion."""

    document: str
    tokens_per_second: int
    raw: str = ""


Transport = Callable[[ChatRequest], Dict[str, object]]


def extract_document(content: str) -> str:
    """Extract the HTML document from a model response.

    Prefers an ```html fenced block, then anything from ``<!DOCTYPE html``
    onwards, and otherwise returns the whole response so that malformed output
    is still persisted rather than dropped.
    """
    fenced = _FENCED_HTML.search(content)
    if fenced:
        return fenced.group(1).strip()
    doctype = _DOCTYPE.search(content)
    if doctype:
        return doctype.group(1).strip()
    return content.strip()


class ModelClient:
    """Sends conversations to an OpenAI-compatible chat-completion endpoint."""

    DEFAULT_BASE_URL = "https://api.cerebras.ai/v1"
    DEFAULT_MODEL = "zai-glm-4.7"

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 8192,
        temperature: float = 0.7,
        request_timeout: float = 120.0,
        attempts: int = 3,
        backoff_seconds: float = 2.0,
        transport: Transport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if attempts < 1:
            raise ValueError("attempts must be at least 1")
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.request_timeout = request_timeout
        self.attempts = attempts
        self.backoff_seconds = backoff_seconds
        self._transport = transport or self._http_transport
        self._sleep = sleep
        self._clock = clock
        self.logger = get_logger("llm")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def complete(
        self,
        api_key: str,
        conversation: Sequence[PromptMessage],
        *,
        reporter: Reporter | None = None,
    ) -> Completion:
        """Run the conversation, retrying with linear backoff on failure."""
        reporter = reporter or LoggingReporter(self.logger)
        request = ChatRequest(
            endpoint=self.endpoint,
            api_key=api_key,
            payload={
                "model": self.model,
                "messages": [message.to_dict() for message in conversation],
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
            },
            timeout=self.request_timeout,
        )

        last_error: Optional[Exception] = None
        for attempt in range(1, self.attempts + 1):
            started = self._clock()
            try:
                response = self._transport(request)
                content = self._extract_content(response)
                if not content:
                    raise RuntimeError("Empty response from API")
            except _RETRYABLE_ERRORS as exc:
                last_error = exc
                if attempt < self.attempts:
                    reporter.warning(f"API attempt {attempt} failed ({exc}), retrying…")
                    self._sleep(self.backoff_seconds * attempt)
                continue

            elapsed = self._clock() - started
            return Completion(
                document=extract_document(content),
                tokens_per_second=self._tokens_per_second(response, elapsed),
                raw=content,
            )

        raise ModelCallFailure(str(last_error)) from last_error

    @staticmethod
    def _http_transport(request: ChatRequest) -> Dict[str, object]:
        data = json.dumps(request.payload).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {request.api_key}",
        }
        http_request = Request(request.endpoint, data=data, headers=headers, method="POST")
        try:
            with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
                raw = response.read()
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore") if hasattr(exc, "read") else ""
            raise RuntimeError(f"HTTP {exc.code}: {detail.strip()[:200]}") from exc
        except URLError as exc:
            raise RuntimeError(f"Request failed: {exc.reason}") from exc
        except HTTPException as exc:
            raise RuntimeError(f"Malformed HTTP response: {exc!r}") from exc

        try:
            payload = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise RuntimeError("Model endpoint returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise RuntimeError("Model endpoint returned an unexpected payload")
        return payload

    @staticmethod
    def _extract_content(payload: Dict[str, object]) -> str:
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            return ""
        first = choices[0]
        if not isinstance(first, dict):
            return ""
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str):
                return content
        return ""

    @staticmethod
    def _tokens_per_second(payload: Dict[str, object], elapsed: float) -> int:
        usage = payload.get("usage")
        completion_tokens = 0
        if isinstance(usage, dict) and isinstance(usage.get("completion_tokens"), (int, float)):
            completion_tokens = usage["completion_tokens"]  # type: ignore[assignment]

        # Prefer server-side timing when the provider reports it.
        time_info = payload.get("time_info")
        if isinstance(time_info, dict) and isinstance(time_info.get("completion_time"), (int, float)):
            elapsed = float(time_info["completion_time"])  # type: ignore[arg-type]

        if elapsed <= 0:
            return 0
        return round(completion_tokens / elapsed)


__all__ = ["ChatRequest", "Completion", "ModelCallFailure", "ModelClient", "extract_document"]
