"""Core configuration dataclasses.

We keep config parsing outside the core, but these dataclasses define the
shape the core expects so adapters and app layers can build safely.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping


@dataclass(frozen=True)
class RateLimitConfig:
    """Per-user request budget: at most max_requests per window_seconds."""

    max_requests: int = 2
    window_seconds: float = 30.0

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError(f"max_requests must be positive, got {self.max_requests}")
        if self.window_seconds <= 0:
            raise ValueError(f"window_seconds must be positive, got {self.window_seconds}")


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling and safety parameters sent with every completion request."""

    temperature: float = 0.7
    top_p: float = 0.8
    top_k: int = 40
    max_output_tokens: int = 1024
    safety_threshold: str = "BLOCK_MEDIUM_AND_ABOVE"


@dataclass(frozen=True)
class ReplyTexts:
    """User-visible reply copy.

    `welcome` and `help` may reference `{handle}` and `{name}`; they are
    formatted when sent.
    """

    assistant_name: str = "TICS AI"
    rate_limited: str = "⏱️ Please wait a moment before asking another question!"
    empty_query: str = '👋 Hi! Ask me anything about Qubetics! For example: "What makes Qubetics unique?"'
    remote_error: str = "⚠️ I'm having trouble connecting to my knowledge base. Please try again in a moment!"
    malformed_response: str = (
        "💭 I'm thinking hard about that question! Please try rephrasing or ask me "
        "something else about Qubetics."
    )
    apology: str = "😔 Sorry, something went wrong on my side. Please try again later."
    welcome: str = (
        "👋 Hi everyone! I'm {name}, your Qubetics assistant.\n\n"
        "Mention me with @{handle} followed by your question, or reply to one of my "
        "messages, and I'll do my best to help."
    )
    help: str = (
        "🤖 I'm {name}. Ask me anything about Qubetics!\n\n"
        "In groups, mention @{handle} with your question or reply to my message. "
        "In a private chat, just type your question."
    )

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ReplyTexts":
        """Build texts from a config mapping, ignoring unknown keys."""

        known = {field.name for field in fields(cls)}
        return cls(**{key: str(value) for key, value in raw.items() if key in known})
