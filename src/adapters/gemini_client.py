"""Gemini completion adapter.

Implements the core CompletionPort with the generateContent REST endpoint.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from core.config import GenerationConfig
from core.errors import MalformedCompletionError, RemoteCompletionError

LOGGER = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash"
SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def build_payload(prompt: str, generation: GenerationConfig) -> dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": generation.temperature,
            "topP": generation.top_p,
            "topK": generation.top_k,
            "maxOutputTokens": generation.max_output_tokens,
        },
        "safetySettings": [
            {"category": category, "threshold": generation.safety_threshold}
            for category in SAFETY_CATEGORIES
        ],
    }


def extract_text(data: Any) -> Optional[str]:
    """Return the text of the first candidate that has any, else None."""

    if not isinstance(data, dict):
        return None
    for candidate in data.get("candidates") or []:
        if not isinstance(candidate, dict):
            continue
        content = candidate.get("content") or {}
        parts = content.get("parts") if isinstance(content, dict) else None
        texts = [
            part["text"]
            for part in parts or []
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        text = "".join(texts).strip()
        if text:
            return text
    return None


class GeminiCompletionClient:
    """CompletionPort adapter backed by a shared httpx.AsyncClient."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        api_key: str,
        *,
        model: str = DEFAULT_MODEL,
        generation: Optional[GenerationConfig] = None,
        base_url: str = GEMINI_BASE_URL,
    ) -> None:
        self._http = http
        self._api_key = api_key
        self._model = model
        self._generation = generation or GenerationConfig()
        self._base_url = base_url.rstrip("/")

    def _endpoint(self) -> str:
        return f"{self._base_url}/models/{self._model}:generateContent"

    async def complete(self, prompt: str) -> str:
        """POST the prompt and return the completion text."""

        payload = build_payload(prompt, self._generation)
        # The key goes in a header so it never shows up in logged URLs.
        headers = {"x-goog-api-key": self._api_key}
        try:
            response = await self._http.post(self._endpoint(), json=payload, headers=headers)
        except httpx.HTTPError as exc:
            raise RemoteCompletionError(f"Gemini request failed: {exc!r}") from exc

        if not response.is_success:
            detail = response.text[:200]
            raise RemoteCompletionError(
                f"Gemini API error {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedCompletionError("Gemini response is not JSON") from exc

        text = extract_text(data)
        if text is None:
            block_reason = (data.get("promptFeedback") or {}).get("blockReason") if isinstance(data, dict) else None
            raise MalformedCompletionError(f"Gemini response has no usable candidate (block_reason={block_reason})")
        LOGGER.debug("Gemini completion received (%s chars)", len(text))
        return text
