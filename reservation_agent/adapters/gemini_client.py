from __future__ import annotations

from typing import Protocol

try:
    from google import genai  # type: ignore[attr-defined]
except ImportError:  # pragma: no cover - optional dependency guard
    genai = None  # type: ignore


class CompletionServiceError(RuntimeError):
    """Raised when the completion service fails or returns no text."""


class CompletionClient(Protocol):
    def complete(self, prompt: str) -> str:  # pragma: no cover - interface
        ...


class GeminiCompletionClient:
    """Single-shot text completion against a Gemini model."""

    def __init__(self, model_name: str, api_key: str) -> None:
        if genai is None:
            raise RuntimeError("google-genai package is required for the booking assistant")
        if not api_key:
            raise RuntimeError("Gemini API key is required for the booking assistant")
        self._client = genai.Client(api_key=api_key)
        self._model_name = model_name

    def complete(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(model=self._model_name, contents=prompt)
        except Exception as exc:
            raise CompletionServiceError(f"Gemini request failed: {exc}") from exc
        return self._extract_text(response)

    def _extract_text(self, response) -> str:
        text = getattr(response, "text", None)
        if text:
            return text
        candidates = getattr(response, "candidates", None) or []
        for candidate in candidates:
            content = getattr(candidate, "content", None)
            parts = (getattr(content, "parts", None) or []) if content else []
            for part in parts:
                value = getattr(part, "text", None)
                if value:
                    return value
        raise CompletionServiceError("Gemini did not return text for the booking prompt")
