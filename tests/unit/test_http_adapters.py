"""HTTP backend adapter tests."""

import json
from unittest.mock import patch

import httpx
import pybreaker
import pytest
import respx

from appforge.clients.base import BackendTransportError
from appforge.clients.http import (
    AnthropicAdapter,
    BreakerListener,
    MiniMaxAdapter,
    OpenAIAdapter,
    ZhipuAdapter,
)
from appforge.models.config import AdapterConfig, ProviderId


ANTHROPIC_URL = "https://api.anthropic.test/v1"
OPENAI_URL = "https://api.openai.test/v1"


def anthropic_config(**overrides) -> AdapterConfig:
    return AdapterConfig(
        provider=ProviderId.CLAUDE, api_key="sk-ant-test", base_url=ANTHROPIC_URL, **overrides
    )


def openai_config(**overrides) -> AdapterConfig:
    return AdapterConfig(provider=ProviderId.OPENAI, api_key="sk-test", base_url=OPENAI_URL, **overrides)


# ============================================================================
# Anthropic
# ============================================================================

@pytest.mark.unit
@respx.mock
def test_anthropic_request_and_parse():
    route = respx.post(f"{ANTHROPIC_URL}/messages").mock(
        return_value=httpx.Response(200, json={
            "model": "claude-sonnet-4-5-20250929",
            "content": [{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}],
            "usage": {"input_tokens": 12, "output_tokens": 8},
        })
    )

    with AnthropicAdapter(anthropic_config()) as adapter:
        result = adapter.complete("Build it", system="Be brief", max_tokens=256)

    assert result.text == "Hello world"
    assert result.usage.prompt_tokens == 12
    assert result.usage.completion_tokens == 8
    assert result.usage.total_tokens == 20
    assert result.model_used == "claude-sonnet-4-5-20250929"

    sent = route.calls.last.request
    assert sent.headers["x-api-key"] == "sk-ant-test"
    assert sent.headers["anthropic-version"] == "2023-06-01"
    body = json.loads(sent.content)
    assert body["model"] == "claude-sonnet-4-5"
    assert body["system"] == "Be brief"
    assert body["max_tokens"] == 256
    assert body["messages"] == [{"role": "user", "content": "Build it"}]


@pytest.mark.unit
@respx.mock
def test_anthropic_default_system_prompt_and_hint():
    route = respx.post(f"{ANTHROPIC_URL}/messages").mock(
        return_value=httpx.Response(200, json={"content": [{"type": "text", "text": "ok"}]})
    )

    adapter = AnthropicAdapter(anthropic_config(max_tokens=1024))
    result = adapter.complete("Build it", model="claude-opus-4-1")

    body = json.loads(route.calls.last.request.content)
    assert body["system"] == adapter.default_system_prompt
    assert body["model"] == "claude-opus-4-1"
    assert body["max_tokens"] == 1024
    assert result.model_used == "claude-opus-4-1"
    assert result.usage is None


@pytest.mark.unit
@respx.mock
def test_anthropic_malformed_success_body():
    respx.post(f"{ANTHROPIC_URL}/messages").mock(
        return_value=httpx.Response(200, json={
            "model": None,
            "content": [{"type": "text", "text": {"nested": True}}, {"type": "text", "text": "ok"}, "stray"],
            "usage": {"input_tokens": "12", "output_tokens": "lots"},
        })
    )

    result = AnthropicAdapter(anthropic_config()).complete("x", model="claude-opus-4-1")

    assert result.text == "ok"
    assert result.model_used == "claude-opus-4-1"
    assert result.usage.prompt_tokens == 12
    assert result.usage.completion_tokens == 0


# ============================================================================
# Chat completions
# ============================================================================

@pytest.mark.unit
@respx.mock
def test_openai_request_and_parse():
    route = respx.post(f"{OPENAI_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json={
            "model": "gpt-4o",
            "choices": [{"message": {"role": "assistant", "content": "struct App {}"}}],
            "usage": {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": 12},
        })
    )

    result = OpenAIAdapter(openai_config()).complete("Build it", system="Swift only")

    assert result.text == "struct App {}"
    assert result.usage.total_tokens == 12
    sent = route.calls.last.request
    assert sent.headers["authorization"] == "Bearer sk-test"
    body = json.loads(sent.content)
    assert body["messages"][0] == {"role": "system", "content": "Swift only"}
    assert body["messages"][1] == {"role": "user", "content": "Build it"}


@pytest.mark.unit
@respx.mock
def test_openai_empty_choices():
    respx.post(f"{OPENAI_URL}/chat/completions").mock(return_value=httpx.Response(200, json={"choices": []}))
    assert OpenAIAdapter(openai_config()).complete("x").text == ""


@pytest.mark.unit
@respx.mock
@pytest.mark.parametrize("body", [
    {"choices": [{"message": "not a dict"}]},
    {"choices": [{"message": {"content": ["a", "b"]}}]},
    {"choices": {"0": {"message": {"content": "x"}}}},
    {"choices": [], "usage": {"prompt_tokens": "many", "completion_tokens": None, "total_tokens": [1]}},
    {"choices": [], "model": 42, "usage": {"prompt_tokens": float("inf")}},
])
def test_openai_malformed_success_body(body):
    respx.post(f"{OPENAI_URL}/chat/completions").mock(
        return_value=httpx.Response(200, content=json.dumps(body))
    )

    result = OpenAIAdapter(openai_config()).complete("x", model="gpt-4o")

    assert result.text == ""
    assert result.model_used == "gpt-4o"
    assert result.usage is None or result.usage.total_tokens == 0


@pytest.mark.unit
@respx.mock
def test_minimax_and_zhipu_paths():
    minimax = respx.post("https://minimax.test/v1/text/chatcompletion_v2").mock(
        return_value=httpx.Response(200, json={"choices": [{"message": {"content": "mm"}}]})
    )
    zhipu = respx.post("https://zhipu.test/v4/chat/completions").mock(
        return_value=httpx.Response(200, json={"choices": [{"message": {"content": "glm"}}]})
    )

    mm = MiniMaxAdapter(AdapterConfig(provider=ProviderId.MINIMAX, base_url="https://minimax.test/v1/"))
    glm = ZhipuAdapter(AdapterConfig(provider=ProviderId.ZHIPU, base_url="https://zhipu.test/v4"))

    assert mm.complete("x").text == "mm"
    assert glm.complete("x").text == "glm"
    assert json.loads(minimax.calls.last.request.content)["model"] == "abab6.5s"
    assert json.loads(zhipu.calls.last.request.content)["model"] == "glm-4"


# ============================================================================
# Failure handling
# ============================================================================

@pytest.mark.unit
@respx.mock
def test_error_status_returns_body_text():
    body = '{"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}'
    respx.post(f"{ANTHROPIC_URL}/messages").mock(return_value=httpx.Response(529, text=body))

    result = AnthropicAdapter(anthropic_config()).complete("x")

    assert result.text == body
    assert result.usage is None


@pytest.mark.unit
@respx.mock
def test_non_json_success_returns_raw_text():
    respx.post(f"{OPENAI_URL}/chat/completions").mock(return_value=httpx.Response(200, text="plain words"))
    assert OpenAIAdapter(openai_config()).complete("x").text == "plain words"


@pytest.mark.unit
@respx.mock
def test_timeout_raises_transport_error():
    respx.post(f"{OPENAI_URL}/chat/completions").mock(side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(BackendTransportError) as exc_info:
        OpenAIAdapter(openai_config()).complete("x")

    assert exc_info.value.backend == "openai"
    assert isinstance(exc_info.value.original, httpx.ReadTimeout)


@pytest.mark.unit
@respx.mock
def test_connection_error_raises_transport_error():
    respx.post(f"{ANTHROPIC_URL}/messages").mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(BackendTransportError, match="unreachable"):
        AnthropicAdapter(anthropic_config()).complete("x")


# ============================================================================
# Circuit breaker
# ============================================================================

@pytest.mark.unit
class TestCircuitBreaker:
    """Breaker integration in HTTP adapters."""

    def test_breaker_configured_from_adapter_config(self):
        adapter = OpenAIAdapter(openai_config(breaker_fail_max=3, breaker_reset_timeout=10))

        assert isinstance(adapter._breaker, pybreaker.CircuitBreaker)
        assert adapter._breaker.name == "openai-http"
        assert adapter._breaker.fail_max == 3
        assert isinstance(adapter._breaker.listeners[0], BreakerListener)

    @respx.mock
    def test_breaker_opens_after_repeated_failures(self):
        route = respx.post(f"{OPENAI_URL}/chat/completions").mock(side_effect=httpx.ConnectError("refused"))
        adapter = OpenAIAdapter(openai_config(breaker_fail_max=2, breaker_reset_timeout=60))

        for _ in range(2):
            with pytest.raises(BackendTransportError):
                adapter.complete("x")

        assert adapter._breaker.current_state == "open"

        with pytest.raises(BackendTransportError, match="Circuit breaker open"):
            adapter.complete("x")
        # Open breaker fails fast without touching the network
        assert route.call_count == 2

    @respx.mock
    def test_error_status_does_not_trip_breaker(self):
        respx.post(f"{OPENAI_URL}/chat/completions").mock(return_value=httpx.Response(500, text="boom"))
        adapter = OpenAIAdapter(openai_config(breaker_fail_max=1))

        for _ in range(3):
            assert adapter.complete("x").text == "boom"
        assert adapter._breaker.current_state == "closed"

    def test_state_change_logged(self):
        adapter = OpenAIAdapter(openai_config())
        listener = adapter._breaker.listeners[0]

        with patch("appforge.clients.http.logger") as mock_logger:
            listener.state_change(adapter._breaker, "closed", "open")

            mock_logger.warning.assert_called_once()
            assert mock_logger.warning.call_args[0][0] == "breaker_state_change"
