"""Telegram chat adapter.

Implements the core ChatPort on top of a connected Telethon client.
"""

from __future__ import annotations

from typing import Optional

from telethon.tl import functions, types


class TelegramChat:
    """ChatPort adapter that talks to Telegram through Telethon."""

    def __init__(self, client) -> None:
        self._client = client

    async def send_text(
        self,
        chat_id: int,
        text: str,
        *,
        reply_to: Optional[int] = None,
        rich: bool = False,
    ) -> None:
        """Send a message, as a reply when `reply_to` is given."""

        # parse_mode=None disables Telethon's default Markdown parsing.
        await self._client.send_message(
            chat_id,
            text,
            reply_to=reply_to,
            parse_mode="md" if rich else None,
            link_preview=False,
        )

    async def send_reaction(self, chat_id: int, message_id: int, emoji: str) -> None:
        await self._client(
            functions.messages.SendReactionRequest(
                peer=chat_id,
                msg_id=message_id,
                reaction=[types.ReactionEmoji(emoticon=emoji)],
            )
        )

    async def send_typing(self, chat_id: int) -> None:
        await self._client(
            functions.messages.SetTypingRequest(
                peer=chat_id,
                action=types.SendMessageTypingAction(),
            )
        )
