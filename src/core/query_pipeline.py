"""Query pipeline: admitted question in, completion outcome out."""

from __future__ import annotations

import logging

from core.errors import MalformedCompletionError, RemoteCompletionError
from core.models import CompletionKind, CompletionOutcome
from core.ports import CompletionPort

LOGGER = logging.getLogger(__name__)


def build_prompt(persona: str, query: str) -> str:
    """Concatenate the persona block with the user's question."""

    persona = persona.strip()
    if not persona:
        return f"User question: {query}"
    return f"{persona}\n\nUser question: {query}\n\nAnswer:"


class QueryPipeline:
    """Call the completion port and fold its failures into an outcome."""

    def __init__(self, completion: CompletionPort, persona: str) -> None:
        self._completion = completion
        self._persona = persona

    async def answer(self, query: str) -> CompletionOutcome:
        prompt = build_prompt(self._persona, query)
        try:
            text = await self._completion.complete(prompt)
        except RemoteCompletionError as exc:
            LOGGER.warning("Completion call failed (status=%s): %s", exc.status_code, exc)
            return CompletionOutcome(kind=CompletionKind.REMOTE_ERROR)
        except MalformedCompletionError as exc:
            LOGGER.warning("Completion response malformed: %s", exc)
            return CompletionOutcome(kind=CompletionKind.MALFORMED_RESPONSE)

        text = (text or "").strip()
        if not text:
            LOGGER.warning("Completion returned blank text")
            return CompletionOutcome(kind=CompletionKind.MALFORMED_RESPONSE)
        return CompletionOutcome(kind=CompletionKind.SUCCESS, text=text)
