from __future__ import annotations

import asyncio
from typing import Optional

from telethon.tl.types import MessageEntityBold, MessageEntityMention, MessageEntityMentionName

from adapters.telegram_mapper import build_incoming, is_bot_added, resolve_identity
from core.mentions import mentions_bot_entity
from core.models import ChatKind, MentionKind
from fakes import BOT


class DummyReplyMessage:
    def __init__(self, sender_id: int) -> None:
        self.sender_id = sender_id


class DummyMessage:
    def __init__(
        self,
        *,
        text: Optional[str],
        is_private: bool = False,
        entities=None,
        reply_sender_id: Optional[int] = None,
    ) -> None:
        self.message = text
        self.is_private = is_private
        self.entities = entities
        self.sender_id = 11
        self.chat_id = -100123
        self.id = 55
        self.is_reply = reply_sender_id is not None
        self._reply_sender_id = reply_sender_id

    async def get_reply_message(self):
        if self._reply_sender_id is None:
            return None
        return DummyReplyMessage(self._reply_sender_id)


class DummyUser:
    def __init__(self, user_id: int, username: Optional[str]) -> None:
        self.id = user_id
        self.username = username


class DummyClient:
    def __init__(self, me: DummyUser) -> None:
        self._me = me

    async def get_me(self) -> DummyUser:
        return self._me


class DummyChatAction:
    def __init__(self, user_ids, user_added: bool = True) -> None:
        self.user_ids = user_ids
        self.user_added = user_added
        self.user_joined = False


def test_private_message_maps_to_direct() -> None:
    incoming = asyncio.run(build_incoming(DummyMessage(text="hello", is_private=True)))

    assert incoming.chat_kind == ChatKind.DIRECT
    assert incoming.text == "hello"
    assert incoming.sender_id == 11
    assert incoming.chat_id == -100123
    assert incoming.message_id == 55
    assert incoming.mention_spans == ()
    assert incoming.replied_to_sender_id is None


def test_media_without_caption_has_no_text() -> None:
    incoming = asyncio.run(build_incoming(DummyMessage(text="")))

    assert incoming.text is None
    assert incoming.chat_kind == ChatKind.GROUP


def test_mention_offsets_account_for_utf16() -> None:
    text = "😀 @ticsaibot hi"
    message = DummyMessage(
        text=text,
        entities=[MessageEntityBold(offset=0, length=2), MessageEntityMention(offset=3, length=10)],
    )
    incoming = asyncio.run(build_incoming(message))

    assert len(incoming.mention_spans) == 1
    span = incoming.mention_spans[0]
    assert span.kind == MentionKind.MENTION
    assert text[span.offset_start : span.offset_end] == "@ticsaibot"
    assert mentions_bot_entity(incoming, BOT)


def test_text_mention_carries_user_id() -> None:
    message = DummyMessage(text="TICS help", entities=[MessageEntityMentionName(offset=0, length=4, user_id=BOT.id)])
    incoming = asyncio.run(build_incoming(message))

    span = incoming.mention_spans[0]
    assert span.kind == MentionKind.TEXT_MENTION
    assert span.user_id == BOT.id
    assert (span.offset_start, span.offset_end) == (0, 4)


def test_reply_sender_is_resolved() -> None:
    incoming = asyncio.run(build_incoming(DummyMessage(text="more please", reply_sender_id=BOT.id)))

    assert incoming.replied_to_sender_id == BOT.id


def test_resolve_identity_prefers_account_handle() -> None:
    identity = asyncio.run(resolve_identity(DummyClient(DummyUser(4242, "TicsAiBot")), "@oldname"))

    assert identity.id == 4242
    assert identity.handle == "ticsaibot"


def test_resolve_identity_falls_back_to_configured_handle() -> None:
    identity = asyncio.run(resolve_identity(DummyClient(DummyUser(4242, None)), "@TicsAiBot"))

    assert identity.handle == "ticsaibot"


def test_is_bot_added() -> None:
    assert is_bot_added(DummyChatAction([1, BOT.id]), BOT)
    assert not is_bot_added(DummyChatAction([1, 2]), BOT)
    assert not is_bot_added(DummyChatAction([BOT.id], user_added=False), BOT)


class BrokenReplyMessage(DummyMessage):
    async def get_reply_message(self):
        raise RuntimeError("CHANNEL_PRIVATE")


def test_reply_lookup_failure_leaves_message_undirected() -> None:
    message = BrokenReplyMessage(text="totally unrelated chatter", reply_sender_id=999)
    incoming = asyncio.run(build_incoming(message))

    assert incoming.replied_to_sender_id is None
    assert incoming.text == "totally unrelated chatter"


class DummyCreatedAction:
    def __init__(self) -> None:
        self.created = True
        self.user_added = False
        self.user_joined = False
        self.user_ids = []


def test_group_created_with_bot_triggers_welcome() -> None:
    assert is_bot_added(DummyCreatedAction(), BOT)
