"""Admission gate: should the assistant answer this message?"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from core.mentions import DirectedPredicate, build_predicates, extract_query, is_directed
from core.models import (
    AdmissionDecision,
    AdmissionReason,
    BotIdentity,
    ChatKind,
    IncomingMessage,
)
from core.rate_limiter import RateLimiter

LOGGER = logging.getLogger(__name__)


class AdmissionGate:
    """Directed-message test, then rate limiting, then query extraction."""

    def __init__(
        self,
        identity: BotIdentity,
        rate_limiter: RateLimiter,
        aliases: Iterable[str] = (),
        predicates: Optional[Sequence[DirectedPredicate]] = None,
    ) -> None:
        self._identity = identity
        self._rate_limiter = rate_limiter
        self._predicates = list(predicates) if predicates is not None else build_predicates(aliases)

    @property
    def identity(self) -> BotIdentity:
        return self._identity

    def should_respond(self, message: IncomingMessage) -> AdmissionDecision:
        """Return the admission decision for one inbound message.

        Non-text messages are never directed. A directed message always consumes
        a rate-limit slot, even when its query later turns out to be empty.
        """

        if not message.text:
            return AdmissionDecision(admitted=False, reason=AdmissionReason.NOT_DIRECTED)

        if not is_directed(message, self._identity, self._predicates):
            return AdmissionDecision(admitted=False, reason=AdmissionReason.NOT_DIRECTED)

        if not self._rate_limiter.check_and_consume(message.sender_id):
            LOGGER.info("Rate limited sender %s", message.sender_id)
            return AdmissionDecision(admitted=False, reason=AdmissionReason.RATE_LIMITED)

        if message.chat_kind == ChatKind.DIRECT:
            query = message.text.strip()
        else:
            query = extract_query(message.text, self._identity.handle)

        if not query:
            return AdmissionDecision(
                admitted=True,
                reason=AdmissionReason.EMPTY_QUERY,
                extracted_query="",
            )
        return AdmissionDecision(admitted=True, reason=AdmissionReason.OK, extracted_query=query)
