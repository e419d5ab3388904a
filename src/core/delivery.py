"""Reply delivery with a fallback for platform-side throttling."""

from __future__ import annotations

import logging
from typing import Optional

from core.ports import ChatPort

LOGGER = logging.getLogger(__name__)

THROTTLE_STATUS_CODES = frozenset({420, 429})
THROTTLE_MARKERS = (
    "too many requests",
    "slow mode",
    "slowmode",
    "retry after",
    "flood wait",
    "flood_wait",
)


def is_throttle_error(exc: BaseException) -> bool:
    """Recognize rate-limit-shaped errors by status code or message text."""

    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and value in THROTTLE_STATUS_CODES:
            return True
    message = str(exc).lower()
    return any(marker in message for marker in THROTTLE_MARKERS)


class ReplyDelivery:
    """Send replies; degrade to a reaction when the platform throttles us."""

    def __init__(self, chat: ChatPort, fallback_reaction: str = "👀") -> None:
        self._chat = chat
        self._fallback_reaction = fallback_reaction

    async def reply(self, chat_id: int, reply_to: int, text: str, *, rich: bool = False) -> None:
        try:
            await self._chat.send_text(chat_id, text, reply_to=reply_to, rich=rich)
        except Exception as exc:
            if not is_throttle_error(exc):
                raise
            LOGGER.warning("Reply to %s/%s throttled: %s", chat_id, reply_to, exc)
            await self._react(chat_id, reply_to)

    async def broadcast(self, chat_id: int, text: str) -> None:
        try:
            await self._chat.send_text(chat_id, text)
        except Exception as exc:
            if not is_throttle_error(exc):
                raise
            LOGGER.warning("Broadcast to %s throttled: %s", chat_id, exc)

    async def typing(self, chat_id: int) -> None:
        try:
            await self._chat.send_typing(chat_id)
        except Exception:
            LOGGER.debug("Typing indicator failed for %s", chat_id, exc_info=True)

    async def _react(self, chat_id: int, message_id: Optional[int]) -> None:
        if message_id is None:
            return
        try:
            await self._chat.send_reaction(chat_id, message_id, self._fallback_reaction)
        except Exception:
            LOGGER.warning("Fallback reaction failed for %s/%s", chat_id, message_id, exc_info=True)
