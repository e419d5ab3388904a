"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ChatKind(str, Enum):
    DIRECT = "direct"
    GROUP = "group"


class MentionKind(str, Enum):
    MENTION = "mention"
    TEXT_MENTION = "text_mention"


@dataclass(frozen=True)
class MentionSpan:
    """A structured mention entity, with offsets as Python string indices."""

    offset_start: int
    offset_end: int
    kind: MentionKind
    # Only text mentions carry an attached identity.
    user_id: Optional[int] = None
    username: Optional[str] = None


@dataclass(frozen=True)
class IncomingMessage:
    """Minimal inbound message used by the admission pipeline."""

    text: Optional[str]
    sender_id: int
    chat_kind: ChatKind
    chat_id: int
    message_id: int
    mention_spans: Tuple[MentionSpan, ...] = ()
    replied_to_sender_id: Optional[int] = None


@dataclass(frozen=True)
class BotIdentity:
    """The assistant's own account, resolved once at startup."""

    id: int
    handle: str


class AdmissionReason(str, Enum):
    NOT_DIRECTED = "not_directed"
    RATE_LIMITED = "rate_limited"
    EMPTY_QUERY = "empty_query"
    OK = "ok"


@dataclass(frozen=True)
class AdmissionDecision:
    admitted: bool
    reason: AdmissionReason
    extracted_query: Optional[str] = None


class CompletionKind(str, Enum):
    SUCCESS = "success"
    REMOTE_ERROR = "remote_error"
    MALFORMED_RESPONSE = "malformed_response"


@dataclass(frozen=True)
class CompletionOutcome:
    kind: CompletionKind
    text: Optional[str] = None
