from __future__ import annotations

from core.config import ReplyTexts
from core.replies import MAX_MESSAGE_UNITS, format_answer, format_template, truncate, utf16_length


def test_format_answer_adds_header() -> None:
    texts = ReplyTexts(assistant_name="Helper")
    assert format_answer(texts, "Hello") == "🤖 **Helper:**\n\nHello"


def test_long_answers_are_truncated() -> None:
    body = format_answer(ReplyTexts(), "x" * 10_000)

    assert utf16_length(body) == MAX_MESSAGE_UNITS
    assert body.endswith("...")
    assert truncate("short") == "short"


def test_format_template_fills_placeholders() -> None:
    texts = ReplyTexts(assistant_name="TICS AI")
    assert format_template("I'm {name}, ping @{handle}", texts, "@ticsaibot") == "I'm TICS AI, ping @ticsaibot"


def test_reply_texts_from_mapping_ignores_unknown_keys() -> None:
    texts = ReplyTexts.from_mapping({"rate_limited": "Slow down", "unknown": "x"})

    assert texts.rate_limited == "Slow down"
    assert texts.empty_query == ReplyTexts().empty_query


def test_emoji_answers_fit_telegram_limit() -> None:
    body = format_answer(ReplyTexts(), "🔹 point\n" * 600)

    assert utf16_length(body) <= MAX_MESSAGE_UNITS
    assert body.endswith("...")
    assert "\ud83d" not in body and "\udd39" not in body


def test_truncate_does_not_split_surrogate_pairs() -> None:
    # The cut point (limit - 3 = 4 units) falls inside the second emoji.
    result = truncate("a😀😀😀😀", limit=7)

    assert result == "a😀..."
    assert utf16_length(result) <= 7
