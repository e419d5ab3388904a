"""Telegram-to-core message mapping adapter.

This keeps Telethon-specific details out of the core pipeline.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from telethon.helpers import add_surrogate, del_surrogate
from telethon.tl.custom import Message
from telethon.tl.types import (
    InputMessageEntityMentionName,
    MessageEntityMention,
    MessageEntityMentionName,
)

from core.models import BotIdentity, ChatKind, IncomingMessage, MentionKind, MentionSpan

LOGGER = logging.getLogger(__name__)


async def resolve_identity(client, configured_handle: str = "") -> BotIdentity:
    """Resolve the bot's own identity once at startup."""

    me = await client.get_me()
    handle = (getattr(me, "username", None) or "").lower()
    configured = configured_handle.strip().lstrip("@").lower()
    if configured and handle and configured != handle:
        LOGGER.warning("Configured handle @%s differs from account @%s; using @%s", configured, handle, handle)
    return BotIdentity(id=me.id, handle=handle or configured)


def _span_bounds(text: str, offset: int, length: int) -> Tuple[int, int]:
    # Telegram offsets count UTF-16 code units; convert them to str indices.
    surrogated = add_surrogate(text)
    start = len(del_surrogate(surrogated[:offset]))
    end = len(del_surrogate(surrogated[: offset + length]))
    return start, end


def mention_spans_from_message(message: Message) -> Tuple[MentionSpan, ...]:
    text = getattr(message, "message", None) or ""
    spans = []
    for entity in getattr(message, "entities", None) or []:
        if isinstance(entity, MessageEntityMention):
            start, end = _span_bounds(text, entity.offset, entity.length)
            spans.append(MentionSpan(start, end, MentionKind.MENTION))
        elif isinstance(entity, (MessageEntityMentionName, InputMessageEntityMentionName)):
            start, end = _span_bounds(text, entity.offset, entity.length)
            user_id = getattr(entity, "user_id", None)
            spans.append(
                MentionSpan(
                    start,
                    end,
                    MentionKind.TEXT_MENTION,
                    user_id=user_id if isinstance(user_id, int) else None,
                )
            )
    return tuple(spans)


async def _replied_to_sender_id(message: Message) -> Optional[int]:
    if not getattr(message, "is_reply", False):
        return None
    try:
        reply = await message.get_reply_message()
    except Exception as exc:
        LOGGER.debug("Could not fetch replied-to message for %s: %s", getattr(message, "id", None), exc)
        return None
    if reply is None:
        return None
    return getattr(reply, "sender_id", None)


async def build_incoming(message: Message) -> IncomingMessage:
    """Build a core IncomingMessage from a Telethon Message."""

    text = getattr(message, "message", None) or None
    chat_kind = ChatKind.DIRECT if getattr(message, "is_private", False) else ChatKind.GROUP

    return IncomingMessage(
        text=text,
        sender_id=message.sender_id,
        chat_kind=chat_kind,
        chat_id=message.chat_id,
        message_id=message.id,
        mention_spans=mention_spans_from_message(message),
        replied_to_sender_id=await _replied_to_sender_id(message),
    )


def is_bot_added(event, identity: BotIdentity) -> bool:
    """True for a ChatAction event that adds the bot to a group."""

    # The bot only sees a group creation it is already a member of.
    if getattr(event, "created", False):
        return True
    if not (getattr(event, "user_added", False) or getattr(event, "user_joined", False)):
        return False
    user_ids = getattr(event, "user_ids", None) or []
    return identity.id in user_ids
