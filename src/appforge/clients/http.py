"""HTTP Backend Adapters"""

import time
from typing import Any

import httpx
import pybreaker

from appforge.core import get_logger
from appforge.models.config import AdapterConfig, ProviderId
from appforge.monitoring import metrics_collector
from .base import BackendAdapter, BackendTransportError, Completion, Usage

logger = get_logger(__name__)


def token_count(value: Any) -> int:
    """Provider token count, 0 when missing or not a number."""
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def reported_model(data: dict, requested: str) -> str:
    """Model named in the response body, else the one requested."""
    reported = data.get("model")
    return reported if isinstance(reported, str) and reported else requested


class BreakerListener(pybreaker.CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def state_change(self, cb, old_state, new_state):
        """Called when circuit breaker state changes."""
        logger.warning(
            "breaker_state_change",
            breaker=cb.name,
            from_state=str(old_state),
            to_state=str(new_state),
        )


class HTTPBackendAdapter(BackendAdapter):
    """
    Adapter for providers reached with one JSON POST per completion.
    Transport calls go through a circuit breaker; an open breaker fails fast.
    """

    def __init__(self, config: AdapterConfig, transport: httpx.BaseTransport | None = None) -> None:
        """
        Initialize adapter with circuit breaker.

        Args:
            config: Provider credentials, endpoint and limits
            transport: Optional httpx transport (tests)
        """
        self.config = config
        self.backend_id = config.provider.value
        self.base_url = config.base_url.rstrip("/")
        self._client = httpx.Client(timeout=config.timeout, transport=transport)
        self._breaker = pybreaker.CircuitBreaker(
            fail_max=config.breaker_fail_max,
            reset_timeout=config.breaker_reset_timeout,
            name=f"{self.backend_id}-http",
            listeners=[BreakerListener()],
        )

        logger.info("adapter_init", backend=self.backend_id, url=self.base_url, model=self.model)

    @property
    def model(self) -> str:
        return self.config.resolved_model

    def build_request(
        self, prompt: str, system: str, model: str, max_tokens: int
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (url, headers, payload) for one call."""
        raise NotImplementedError

    def parse_response(self, data: Any, model: str) -> Completion:
        """Convert a decoded 2xx body into a Completion."""
        raise NotImplementedError

    def complete(
        self,
        prompt: str,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> Completion:
        model_name = model or self.model
        url, headers, payload = self.build_request(
            prompt,
            system or self.default_system_prompt,
            model_name,
            max_tokens or self.config.max_tokens,
        )

        start_time = time.time()
        try:
            response = self._breaker.call(self._client.post, url, headers=headers, json=payload)
        except pybreaker.CircuitBreakerError as e:
            metrics_collector.record_backend_call(self.backend_id, "breaker_open", time.time() - start_time)
            logger.error("complete_failed", backend=self.backend_id, error="Circuit breaker open")
            raise BackendTransportError(
                f"Circuit breaker open for backend '{self.backend_id}'", self.backend_id, e
            ) from e
        except httpx.RequestError as e:
            metrics_collector.record_backend_call(self.backend_id, "transport_error", time.time() - start_time)
            logger.warning("transport_error", backend=self.backend_id, error=str(e))
            raise BackendTransportError(
                f"Backend '{self.backend_id}' unreachable: {e}", self.backend_id, e
            ) from e

        duration = time.time() - start_time

        # Provider error bodies are returned as text, not raised
        if response.status_code >= 400:
            metrics_collector.record_backend_call(self.backend_id, "http_error", duration)
            logger.warning(
                "provider_error_status",
                backend=self.backend_id,
                status=response.status_code,
                body_preview=response.text[:200],
            )
            return Completion(text=response.text, usage=None, model_used=model_name)

        try:
            data = response.json()
        except ValueError:
            metrics_collector.record_backend_call(self.backend_id, "success", duration)
            return Completion(text=response.text, usage=None, model_used=model_name)

        completion = self.parse_response(data, model_name)
        metrics_collector.record_backend_call(self.backend_id, "success", duration)
        if completion.usage:
            metrics_collector.record_backend_tokens(
                self.backend_id, completion.usage.prompt_tokens, completion.usage.completion_tokens
            )

        logger.debug(
            "complete",
            backend=self.backend_id,
            model=completion.model_used,
            chars=len(completion.text),
            duration_ms=duration * 1000,
        )
        return completion

    def close(self) -> None:
        """Close HTTP client"""
        self._client.close()

    def __enter__(self) -> "HTTPBackendAdapter":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class AnthropicAdapter(HTTPBackendAdapter):
    """Anthropic messages API."""

    api_version = "2023-06-01"

    def build_request(self, prompt, system, model, max_tokens):
        headers = {
            "x-api-key": self.config.api_key,
            "anthropic-version": self.api_version,
            "content-type": "application/json",
        }
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": self.config.temperature,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        return f"{self.base_url}/messages", headers, payload

    def parse_response(self, data, model):
        if not isinstance(data, dict):
            return Completion(text="", model_used=model)

        blocks = data.get("content")
        if not isinstance(blocks, list):
            blocks = []
        text = "".join(
            block["text"] for block in blocks
            if isinstance(block, dict)
            and block.get("type", "text") == "text"
            and isinstance(block.get("text"), str)
        )

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict):
            prompt_tokens = token_count(raw_usage.get("input_tokens"))
            completion_tokens = token_count(raw_usage.get("output_tokens"))
            usage = Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            )

        return Completion(text=text, usage=usage, model_used=reported_model(data, model))


class ChatCompletionsAdapter(HTTPBackendAdapter):
    """OpenAI-compatible chat completions (OpenAI, MiniMax, Zhipu)."""

    chat_path = "/chat/completions"

    def build_request(self, prompt, system, model, max_tokens):
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "content-type": "application/json",
        }
        payload = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": self.config.temperature,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
        }
        return f"{self.base_url}{self.chat_path}", headers, payload

    def parse_response(self, data, model):
        if not isinstance(data, dict):
            return Completion(text="", model_used=model)

        text = ""
        choices = data.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            message = choices[0].get("message")
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                text = message["content"]

        usage = None
        raw_usage = data.get("usage")
        if isinstance(raw_usage, dict):
            prompt_tokens = token_count(raw_usage.get("prompt_tokens"))
            completion_tokens = token_count(raw_usage.get("completion_tokens"))
            usage = Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=token_count(raw_usage.get("total_tokens")) or prompt_tokens + completion_tokens,
            )

        return Completion(text=text, usage=usage, model_used=reported_model(data, model))


class OpenAIAdapter(ChatCompletionsAdapter):
    pass


class MiniMaxAdapter(ChatCompletionsAdapter):
    chat_path = "/text/chatcompletion_v2"


class ZhipuAdapter(ChatCompletionsAdapter):
    pass


HTTP_ADAPTERS: dict[ProviderId, type[HTTPBackendAdapter]] = {
    ProviderId.CLAUDE: AnthropicAdapter,
    ProviderId.OPENAI: OpenAIAdapter,
    ProviderId.MINIMAX: MiniMaxAdapter,
    ProviderId.ZHIPU: ZhipuAdapter,
}
