import asyncio

import pytest

from viral_pipeline.errors import AllProvidersExhausted
from viral_pipeline.llm.dispatcher import FallbackDispatcher

from fakes import FakeTextProvider


def _dispatcher(a, b, c, kind="script"):
    return FallbackDispatcher({"a": a, "b": b, "c": c}, {kind: ["a", "b", "c"]})


def test_falls_back_in_priority_order(log_messages):
    a = FakeTextProvider("a", error="connection reset")
    b = FakeTextProvider("b", "script from b")
    c = FakeTextProvider("c", "script from c")

    result = asyncio.run(_dispatcher(a, b, c).generate("script", "write it", max_tokens=2000, temperature=0.7))

    assert result == "script from b"
    assert len(a.calls) == 1
    assert len(b.calls) == 1
    assert c.calls == []
    assert b.calls[0]["model"] == "b-model"
    assert b.calls[0]["max_tokens"] == 2000

    attempts = [message for message in log_messages if "attempt" in message]
    assert attempts == ["[script] attempt 1/3 with a", "[script] attempt 2/3 with b"]
    assert "[script] handled by b (fallback)" in log_messages


def test_third_provider_answers_after_two_failures(log_messages):
    a = FakeTextProvider("a", error="HTTP 503")
    b = FakeTextProvider("b", error="timed out after 60s")
    c = FakeTextProvider("c", "script from c")

    result = asyncio.run(_dispatcher(a, b, c).generate("script", "write it"))

    assert result == "script from c"
    assert [len(p.calls) for p in (a, b, c)] == [1, 1, 1]
    attempts = [message for message in log_messages if "attempt" in message]
    assert attempts == [
        "[script] attempt 1/3 with a",
        "[script] attempt 2/3 with b",
        "[script] attempt 3/3 with c",
    ]
    assert "[script] handled by c (fallback)" in log_messages


def test_chain_naming_a_provider_twice_is_rejected():
    a = FakeTextProvider("a", "x")

    with pytest.raises(ValueError, match="repeats a provider"):
        FallbackDispatcher({"a": a}, {"script": ["a", "a"]})


def test_first_provider_success_is_not_a_fallback(log_messages):
    a = FakeTextProvider("a", "first")
    b = FakeTextProvider("b", "second")
    c = FakeTextProvider("c", "third")

    assert asyncio.run(_dispatcher(a, b, c).generate("script", "p", video_id="v1")) == "first"
    assert b.calls == []
    assert "[script] video v1: handled by a" in log_messages


def test_all_providers_failing_raises_with_every_error():
    a = FakeTextProvider("a", error="timeout")
    b = FakeTextProvider("b", error="HTTP 500")
    c = FakeTextProvider("c", error="rate limited")

    with pytest.raises(AllProvidersExhausted) as excinfo:
        asyncio.run(_dispatcher(a, b, c, kind="title").generate("title", "p"))

    assert excinfo.value.kind == "title"
    assert set(excinfo.value.errors) == {"a", "b", "c"}
    assert "rate limited" in excinfo.value.errors["c"]
    # Each provider gets exactly one attempt
    assert [len(p.calls) for p in (a, b, c)] == [1, 1, 1]


def test_unconfigured_provider_is_skipped():
    b = FakeTextProvider("b", "from b")
    dispatcher = FallbackDispatcher({"b": b}, {"script": ["a", "b"]})

    assert asyncio.run(dispatcher.generate("script", "p")) == "from b"


def test_structured_output_that_does_not_decode_falls_back():
    a = FakeTextProvider("a", "Sorry, I cannot produce JSON today.")
    b = FakeTextProvider("b", '```json\n{"primaryKeywords": ["focus"]}\n```')
    c = FakeTextProvider("c", "{}")

    result = asyncio.run(_dispatcher(a, b, c, kind="keywords").generate_structured("keywords", "p", dict))

    assert result == {"primaryKeywords": ["focus"]}
    assert c.calls == []


def test_structured_output_of_wrong_type_counts_as_failure():
    a = FakeTextProvider("a", '{"sentences": []}')
    b = FakeTextProvider("b", '["One.", "Two."]')
    c = FakeTextProvider("c", "[]")

    result = asyncio.run(_dispatcher(a, b, c, kind="breakdown").generate_structured("breakdown", "p", list))

    assert result == ["One.", "Two."]


def test_unknown_kind_is_rejected():
    dispatcher = FallbackDispatcher({}, {"script": ["a"]})

    with pytest.raises(ValueError):
        asyncio.run(dispatcher.generate("poetry", "p"))
