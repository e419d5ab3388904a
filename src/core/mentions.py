"""Directed-message detection and query extraction (core domain).

A message is directed at the assistant when any predicate in an ordered list
says so. Structured mention entities are checked before the substring/alias
fallback. The fallback also fires on unrelated text that happens to contain an
alias (e.g. "tics ai" inside a longer sentence about something else); that
imprecision is accepted so clients without mention entities still work.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, List, Sequence

from core.models import BotIdentity, ChatKind, IncomingMessage, MentionKind

DirectedPredicate = Callable[[IncomingMessage, BotIdentity], bool]

_LEADING_HANDLE = re.compile(r"^@\w+")


def _normalize_handle(value: str) -> str:
    return value.strip().lstrip("@").lower()


def is_direct_chat(message: IncomingMessage, identity: BotIdentity) -> bool:
    return message.chat_kind == ChatKind.DIRECT


def mentions_bot_entity(message: IncomingMessage, identity: BotIdentity) -> bool:
    """Match `@handle` mention entities and text mentions of the bot."""

    text = message.text or ""
    handle = _normalize_handle(identity.handle)
    for span in message.mention_spans:
        if span.kind == MentionKind.MENTION:
            mentioned = text[span.offset_start : span.offset_end]
            if handle and _normalize_handle(mentioned) == handle:
                return True
        elif span.kind == MentionKind.TEXT_MENTION:
            if span.user_id is not None and span.user_id == identity.id:
                return True
            if handle and span.username and _normalize_handle(span.username) == handle:
                return True
    return False


def replies_to_bot(message: IncomingMessage, identity: BotIdentity) -> bool:
    return message.replied_to_sender_id is not None and message.replied_to_sender_id == identity.id


class AliasMatcher:
    """Case-insensitive substring match on the handle and configured aliases."""

    def __init__(self, aliases: Iterable[str] = ()) -> None:
        self._aliases = [alias.strip().lower() for alias in aliases if alias and alias.strip()]

    @property
    def aliases(self) -> List[str]:
        return list(self._aliases)

    def __call__(self, message: IncomingMessage, identity: BotIdentity) -> bool:
        lowered = (message.text or "").lower()
        handle = _normalize_handle(identity.handle)
        if handle and handle in lowered:
            return True
        return any(alias in lowered for alias in self._aliases)


def build_predicates(aliases: Iterable[str] = ()) -> List[DirectedPredicate]:
    """Return the default predicate chain, most reliable signal first."""

    return [is_direct_chat, mentions_bot_entity, replies_to_bot, AliasMatcher(aliases)]


def is_directed(
    message: IncomingMessage,
    identity: BotIdentity,
    predicates: Sequence[DirectedPredicate],
) -> bool:
    return any(predicate(message, identity) for predicate in predicates)


def extract_query(text: str, handle: str) -> str:
    """Strip the bot handle and one leading `@word` token from group text."""

    stripped = text
    normalized = _normalize_handle(handle)
    if normalized:
        pattern = re.compile(re.escape(f"@{normalized}"), re.IGNORECASE)
        stripped = pattern.sub("", stripped, count=1)
    stripped = _LEADING_HANDLE.sub("", stripped.lstrip(), count=1)
    return stripped.strip()
