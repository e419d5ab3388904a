"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the completion provider and the chat
platform so the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Optional, Protocol


class CompletionPort(Protocol):
    """Generative-language call required by the query pipeline."""

    async def complete(self, prompt: str) -> str:
        ...


class ChatPort(Protocol):
    """Chat platform operations required by reply delivery."""

    async def send_text(
        self,
        chat_id: int,
        text: str,
        *,
        reply_to: Optional[int] = None,
        rich: bool = False,
    ) -> None:
        ...

    async def send_reaction(self, chat_id: int, message_id: int, emoji: str) -> None:
        ...

    async def send_typing(self, chat_id: int) -> None:
        ...
