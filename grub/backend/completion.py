"""
Completion client abstraction for Gemini and in-memory testing.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

from grub.models import gemini
from grub.models.gemini import UpstreamError


@dataclass
class CompletionRequest:
    model_name: str
    prompt_text: str


@dataclass
class CompletionResponse:
    text: str


class CompletionClient(Protocol):
    """Sends one prompt to the completion service and returns its text."""

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        ...

    def close(self) -> None:
        ...


@dataclass
class InMemoryCompletionClient:
    """Scripted test double; replies are consumed in FIFO order."""

    responses: deque = field(default_factory=deque)
    requests: list[CompletionRequest] = field(default_factory=list)

    def queue_response(self, reply: str | Exception) -> None:
        self.responses.append(reply)

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        self.requests.append(request)
        if not self.responses:
            raise UpstreamError("No scripted completion available")
        reply = self.responses.popleft()
        if isinstance(reply, Exception):
            raise reply
        return CompletionResponse(text=reply)

    def reset(self) -> None:
        self.responses.clear()
        self.requests.clear()

    def close(self) -> None:
        pass


@dataclass
class GeminiCompletionClient:
    """Completion client backed by the google-genai SDK."""

    api_key: str
    timeout_seconds: float | None = None
    max_retries: int = 0

    def __post_init__(self):
        self._client = gemini.make_client(self.api_key, self.timeout_seconds)

    def complete(self, request: CompletionRequest) -> CompletionResponse:
        text = gemini.call_predict_with_retries(
            self._client,
            request.prompt_text,
            model=request.model_name,
            max_retries=self.max_retries,
        )
        return CompletionResponse(text=text)

    def close(self) -> None:
        self._client.close()
