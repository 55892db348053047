"""Gemini adapter over the google-generativeai SDK."""

import time
from typing import Any, Callable, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from appforge.core import get_logger
from appforge.models.config import AdapterConfig
from appforge.monitoring import metrics_collector
from .base import BackendAdapter, BackendTransportError, Completion, Usage


logger = get_logger(__name__)

ModelFactory = Callable[[str, str, int], Any]

# No response obtained; everything else from the provider is answered with text
TRANSPORT_ERRORS = (
    google_exceptions.DeadlineExceeded,
    google_exceptions.ServiceUnavailable,
    google_exceptions.RetryError,
)


class GeminiAdapter(BackendAdapter):
    """Gemini API wrapper."""

    backend_id = "gemini"

    def __init__(self, config: AdapterConfig, model_factory: Optional[ModelFactory] = None) -> None:
        self.config = config
        if model_factory is None:
            genai.configure(api_key=config.api_key)
            model_factory = self._build_model
        self._model_factory = model_factory

        logger.info("adapter_init", backend=self.backend_id, model=self.model)

    @property
    def model(self) -> str:
        return self.config.resolved_model

    def _build_model(self, model_name: str, system: str, max_tokens: int) -> Any:
        generation_config = genai.GenerationConfig(
            temperature=self.config.temperature,
            max_output_tokens=max_tokens,
        )
        return genai.GenerativeModel(
            model_name=model_name,
            generation_config=generation_config,
            system_instruction=system,
        )

    def complete(
        self,
        prompt: str,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> Completion:
        model_name = model or self.model
        gemini = self._model_factory(
            model_name,
            system or self.default_system_prompt,
            max_tokens or self.config.max_tokens,
        )

        start_time = time.time()
        try:
            response = gemini.generate_content(
                prompt, request_options={"timeout": self.config.timeout}
            )
        except TRANSPORT_ERRORS as e:
            metrics_collector.record_backend_call(self.backend_id, "transport_error", time.time() - start_time)
            logger.warning("transport_error", backend=self.backend_id, error=str(e))
            raise BackendTransportError(
                f"Backend '{self.backend_id}' unreachable: {e}", self.backend_id, e
            ) from e
        except google_exceptions.GoogleAPICallError as e:
            # The provider answered with an error; hand its text back
            metrics_collector.record_backend_call(self.backend_id, "http_error", time.time() - start_time)
            logger.warning("provider_error_status", backend=self.backend_id, error=str(e))
            return Completion(text=e.message or str(e), usage=None, model_used=model_name)

        duration = time.time() - start_time
        metrics_collector.record_backend_call(self.backend_id, "success", duration)

        try:
            text = response.text
        except ValueError:
            # Blocked or empty candidates
            text = ""

        usage = self._usage(response)
        if usage:
            metrics_collector.record_backend_tokens(
                self.backend_id, usage.prompt_tokens, usage.completion_tokens
            )

        logger.debug("complete", backend=self.backend_id, model=model_name, chars=len(text))
        return Completion(text=text, usage=usage, model_used=model_name)

    @staticmethod
    def _usage(response: Any) -> Usage | None:
        metadata = getattr(response, "usage_metadata", None)
        if metadata is None:
            return None
        prompt_tokens = int(getattr(metadata, "prompt_token_count", 0) or 0)
        completion_tokens = int(getattr(metadata, "candidates_token_count", 0) or 0)
        total = int(getattr(metadata, "total_token_count", 0) or 0)
        return Usage(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=total or prompt_tokens + completion_tokens,
        )
