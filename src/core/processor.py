"""Core message processing pipeline.

This module is integration-agnostic. It only relies on the admission gate,
the query pipeline and reply delivery, enabling other chat frontends without
changes here.

Per message:
1) Bot commands (/start, /help) are answered directly
2) Admission: directed test, rate limit, query extraction
3) Typing hint + completion call
4) Outcome mapped to a user-safe reply
Any unexpected failure is logged and answered with an apology; nothing
propagates to the event loop.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.admission import AdmissionGate
from core.config import ReplyTexts
from core.delivery import ReplyDelivery
from core.models import AdmissionReason, CompletionKind, IncomingMessage
from core.query_pipeline import QueryPipeline
from core.replies import format_answer, format_failure, format_template

LOGGER = logging.getLogger(__name__)

HELP_COMMANDS = frozenset({"start", "help"})


def parse_command(text: Optional[str], handle: str) -> Optional[str]:
    """Return the command name if `text` is a command for this bot.

    Returns "" for commands addressed to another bot, None for plain text.
    """

    if not text or not text.startswith("/"):
        return None
    token = text.split(maxsplit=1)[0][1:]
    name, _, target = token.partition("@")
    if target and target.lower() != handle.lstrip("@").lower():
        return ""
    return name.lower()


class MessageProcessor:
    """Orchestrates admission, completion and reply delivery."""

    def __init__(
        self,
        gate: AdmissionGate,
        pipeline: QueryPipeline,
        delivery: ReplyDelivery,
        texts: ReplyTexts,
    ) -> None:
        self._gate = gate
        self._pipeline = pipeline
        self._delivery = delivery
        self._texts = texts

    @property
    def _handle(self) -> str:
        return self._gate.identity.handle

    async def handle(self, message: IncomingMessage) -> None:
        """Process one inbound message; never raises."""

        try:
            await self._process(message)
        except Exception:
            LOGGER.exception(
                "Error while processing message %s from %s",
                message.message_id,
                message.sender_id,
            )
            await self.apologize(message.chat_id, message.message_id)

    async def _process(self, message: IncomingMessage) -> None:
        command = parse_command(message.text, self._handle)
        if command is not None:
            if command in HELP_COMMANDS:
                help_text = format_template(self._texts.help, self._texts, self._handle)
                await self._delivery.reply(message.chat_id, message.message_id, help_text)
            return

        decision = self._gate.should_respond(message)
        if decision.reason == AdmissionReason.NOT_DIRECTED:
            return
        if decision.reason == AdmissionReason.RATE_LIMITED:
            await self._delivery.reply(message.chat_id, message.message_id, self._texts.rate_limited)
            return
        if decision.reason == AdmissionReason.EMPTY_QUERY:
            await self._delivery.reply(message.chat_id, message.message_id, self._texts.empty_query)
            return

        await self._delivery.typing(message.chat_id)
        outcome = await self._pipeline.answer(decision.extracted_query or "")

        if outcome.kind == CompletionKind.SUCCESS:
            body = format_answer(self._texts, outcome.text or "")
        elif outcome.kind == CompletionKind.REMOTE_ERROR:
            LOGGER.warning("Answering %s with connectivity notice", message.sender_id)
            body = format_failure(self._texts, self._texts.remote_error)
        else:
            LOGGER.warning("Answering %s with rephrase notice", message.sender_id)
            body = format_failure(self._texts, self._texts.malformed_response)
        await self._delivery.reply(message.chat_id, message.message_id, body, rich=True)

    async def apologize(self, chat_id: int, reply_to: Optional[int]) -> None:
        """Best-effort generic apology; failures are only logged."""

        try:
            if reply_to is None:
                await self._delivery.broadcast(chat_id, self._texts.apology)
            else:
                await self._delivery.reply(chat_id, reply_to, self._texts.apology)
        except Exception:
            LOGGER.warning("Could not send apology to %s", chat_id, exc_info=True)

    async def welcome(self, chat_id: int) -> None:
        """Introduce the assistant in a group it was just added to."""

        text = format_template(self._texts.welcome, self._texts, self._handle)
        await self._delivery.broadcast(chat_id, text)
        LOGGER.info("Sent welcome message to %s", chat_id)
