from __future__ import annotations

import asyncio

from core.errors import MalformedCompletionError, RemoteCompletionError
from core.models import CompletionKind
from core.query_pipeline import QueryPipeline, build_prompt
from fakes import FakeCompletion


def test_success_returns_trimmed_text() -> None:
    completion = FakeCompletion(reply="\n  Qubetics is a layer-1 network.  \n")
    outcome = asyncio.run(QueryPipeline(completion, "You are TICS AI.").answer("what is qubetics?"))

    assert outcome.kind == CompletionKind.SUCCESS
    assert outcome.text == "Qubetics is a layer-1 network."


def test_prompt_combines_persona_and_query() -> None:
    completion = FakeCompletion()
    asyncio.run(QueryPipeline(completion, "You are TICS AI.").answer("what is qubetics?"))

    assert completion.prompts == [build_prompt("You are TICS AI.", "what is qubetics?")]
    assert completion.prompts[0].startswith("You are TICS AI.")
    assert "what is qubetics?" in completion.prompts[0]


def test_blank_persona_sends_only_question() -> None:
    assert build_prompt("   ", "hi") == "User question: hi"


def test_remote_error_is_an_outcome() -> None:
    completion = FakeCompletion(error=RemoteCompletionError("HTTP 500", status_code=500))
    outcome = asyncio.run(QueryPipeline(completion, "").answer("q"))

    assert outcome.kind == CompletionKind.REMOTE_ERROR
    assert outcome.text is None


def test_malformed_response_is_an_outcome() -> None:
    completion = FakeCompletion(error=MalformedCompletionError("no candidates"))
    outcome = asyncio.run(QueryPipeline(completion, "").answer("q"))

    assert outcome.kind == CompletionKind.MALFORMED_RESPONSE


def test_blank_completion_is_malformed() -> None:
    outcome = asyncio.run(QueryPipeline(FakeCompletion(reply="   "), "").answer("q"))

    assert outcome.kind == CompletionKind.MALFORMED_RESPONSE
