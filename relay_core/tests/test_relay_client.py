import asyncio
import logging

import httpx
import pytest

from relay_core.config.relay_config import RelayConfig
from relay_core.domain.exceptions import ApiError
from relay_core.domain.models import GenerationResult, PromptResult
from relay_core.providers.gemini_client import GeminiClient
from relay_core.relay.client import (
    EMPTY_GENERATION_TEXT,
    HIGH_TRAFFIC_TEXT,
    PromptRelayClient,
    build_prompt,
    fallback_text,
)


class FakeProvider:
    """模拟的 Provider。"""

    name = "fake"

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return GenerationResult(provider="fake", model="m", text=self.text)

    async def agenerate(self, prompt):
        return self.generate(prompt)


def test_http_500_returns_high_traffic_text(fake_http, relay_config):
    fake_http.respond(status_code=500, text="boom")
    relay = PromptRelayClient(GeminiClient(relay_config))
    assert relay.generate("How do I donate?", "ctx") == HIGH_TRAFFIC_TEXT
    assert HIGH_TRAFFIC_TEXT == "Our AI service is currently experiencing high traffic. Please try again later."


def test_empty_candidates_returns_fallback(fake_http, relay_config):
    fake_http.respond(payload={"candidates": []})
    relay = PromptRelayClient(GeminiClient(relay_config))
    assert relay.generate("How do I donate?", "ctx") == "I couldn't generate a response."


def test_candidate_text_returned_verbatim(fake_http, relay_config):
    fake_http.respond_with_text("Hello donor")
    relay = PromptRelayClient(GeminiClient(relay_config))
    assert relay.generate("hi", "ctx") == "Hello donor"

    fake_http.respond_with_text("  Hello donor\n")
    assert relay.generate("hi", "ctx") == "  Hello donor\n"


@pytest.mark.parametrize(
    "context, query",
    [
        ("You are a helpful assistant.", "How do I donate?"),
        ("ctx", "a\nb"),
        ("  spaced  ", "  query  "),
        ("", "no context"),
        ("{braces}", "{query}"),
    ],
)
def test_outbound_prompt_matches_template(fake_http, relay_config, context, query):
    relay = PromptRelayClient(GeminiClient(relay_config))
    relay.generate(query, context)
    assert fake_http.last_prompt == context + "\n\nUser Query: " + query
    assert build_prompt(query, context) == context + "\n\nUser Query: " + query


def test_system_context_defaults_to_empty(fake_http, relay_config):
    PromptRelayClient(GeminiClient(relay_config)).generate("q")
    assert fake_http.last_prompt == "\n\nUser Query: q"


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("down"),
        httpx.ReadTimeout("slow"),
    ],
)
def test_network_failures_never_raise(fake_http, relay_config, error):
    fake_http.error = error
    relay = PromptRelayClient(GeminiClient(relay_config))
    assert relay.generate("q", "ctx") == HIGH_TRAFFIC_TEXT


def test_invalid_json_is_transport_failure(fake_http, relay_config):
    fake_http.respond(text="not json", invalid_json=True)
    res = PromptRelayClient(GeminiClient(relay_config)).generate_result("q")
    assert not res.ok
    assert res.error == "transport_failure"
    assert "INVALID_JSON" in res.detail


def test_missing_api_key_is_transport_failure(fake_http):
    cfg = RelayConfig(endpoint="https://example.test", api_key="", timeout=5.0, model="m")
    assert PromptRelayClient(GeminiClient(cfg)).generate("q") == HIGH_TRAFFIC_TEXT
    assert fake_http.calls == []


def test_generate_result_success():
    res = PromptRelayClient(FakeProvider(text="fine")).generate_result("q", "c")
    assert res.ok
    assert res.text == "fine"
    assert res.error is None


def test_generate_result_distinguishes_failures():
    empty = PromptRelayClient(FakeProvider(text=None)).generate_result("q")
    broken = PromptRelayClient(
        FakeProvider(error=ApiError(code="API_ERROR", message="x", http_status=502))
    ).generate_result("q")
    assert empty.error == "empty_generation"
    assert broken.error == "transport_failure"
    assert broken.detail == "API_ERROR: x"


def test_unexpected_exception_is_absorbed():
    relay = PromptRelayClient(FakeProvider(error=RuntimeError("bug")))
    assert relay.generate("q") == HIGH_TRAFFIC_TEXT


def test_transport_failure_is_logged(caplog):
    caplog.set_level(logging.INFO, logger="relay_core")
    relay = PromptRelayClient(FakeProvider(error=ApiError(code="API_ERROR", message="x", http_status=500)))
    relay.generate("q")
    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert errors[0].extra["code"] == "API_ERROR"


def test_empty_generation_is_not_logged_as_error(caplog):
    caplog.set_level(logging.INFO, logger="relay_core")
    PromptRelayClient(FakeProvider(text=None)).generate("q")
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


@pytest.mark.parametrize("text, error", [("x", None), (None, None), (None, ApiError(code="E", message="m"))])
def test_generate_always_returns_non_empty_string(text, error):
    out = PromptRelayClient(FakeProvider(text=text, error=error)).generate("q", "c")
    assert isinstance(out, str)
    assert out


@pytest.mark.asyncio
async def test_agenerate_maps_failures(fake_http, relay_config):
    relay = PromptRelayClient(GeminiClient(relay_config))
    fake_http.respond_with_text("Hello donor")
    assert await relay.agenerate("q", "c") == "Hello donor"

    fake_http.respond(payload={"candidates": []})
    assert await relay.agenerate("q", "c") == EMPTY_GENERATION_TEXT

    fake_http.respond(status_code=500)
    assert await relay.agenerate("q", "c") == HIGH_TRAFFIC_TEXT


@pytest.mark.asyncio
async def test_agenerate_result_unexpected_exception():
    res = await PromptRelayClient(FakeProvider(error=KeyError("k"))).agenerate_result("q")
    assert res.error == "transport_failure"


@pytest.mark.parametrize("status", [500, 429])
def test_single_attempt_without_retries(fake_http, relay_config, status):
    fake_http.respond(status_code=status)
    relay = PromptRelayClient(GeminiClient(relay_config))
    assert relay.generate("q", "c") == HIGH_TRAFFIC_TEXT
    assert len(fake_http.calls) == 1


def test_single_attempt_on_network_error(fake_http, relay_config):
    fake_http.error = httpx.ConnectError("down")
    PromptRelayClient(GeminiClient(relay_config)).generate("q")
    assert len(fake_http.calls) == 1


class EchoProvider:
    """在返回前让出事件循环，把收到的 prompt 原样作为生成文本。"""

    name = "echo"

    def generate(self, prompt):
        return GenerationResult(provider="echo", model="m", text=prompt)

    async def agenerate(self, prompt):
        await asyncio.sleep(0)
        return GenerationResult(provider="echo", model="m", text=prompt)


@pytest.mark.asyncio
async def test_concurrent_agenerate_calls_are_independent():
    relay = PromptRelayClient(EchoProvider())
    queries = [f"question {i}" for i in range(5)]

    replies = await asyncio.gather(*(relay.agenerate(q, "ctx") for q in queries))

    assert replies == [build_prompt(q, "ctx") for q in queries]


def test_fallback_text_for_local_validation_failure():
    res = PromptResult.failure("invalid_input", "topic is empty")
    assert fallback_text(res) == EMPTY_GENERATION_TEXT
