"""Shared reply formatting helpers.

Keeping formatting here prevents drift between the processor and the
startup broadcast, and keeps answers consistent regardless of outcome.
"""

from __future__ import annotations

from core.config import ReplyTexts

# Telegram rejects messages over 4096 UTF-16 code units; leave room for entities.
MAX_MESSAGE_UNITS = 4000


def utf16_length(text: str) -> int:
    """Length as Telegram counts it: astral-plane characters take two units."""

    return len(text.encode("utf-16-le")) // 2


def truncate(text: str, limit: int = MAX_MESSAGE_UNITS) -> str:
    if utf16_length(text) <= limit:
        return text
    encoded = text.encode("utf-16-le")[: (limit - 3) * 2]
    # Never cut a surrogate pair in half.
    return encoded.decode("utf-16-le", errors="ignore") + "..."


def _header(texts: ReplyTexts) -> str:
    return f"🤖 **{texts.assistant_name}:**"


def format_answer(texts: ReplyTexts, answer: str) -> str:
    """Create the Markdown reply body for a successful completion."""

    return truncate(f"{_header(texts)}\n\n{answer}")


def format_failure(texts: ReplyTexts, notice: str) -> str:
    """Create the Markdown reply body for a failed completion."""

    return f"{_header(texts)}\n\n{notice}"


def format_template(template: str, texts: ReplyTexts, handle: str) -> str:
    """Fill `{name}` and `{handle}` placeholders in configurable copy."""

    return template.replace("{name}", texts.assistant_name).replace("{handle}", handle.lstrip("@"))
