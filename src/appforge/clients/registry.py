"""Adapter Registry - backend identifier to adapter instance."""

from typing import Dict, List, Optional

from appforge.core import Settings, get_logger
from appforge.models.config import PROVIDERS, AdapterConfig, ProviderId
from .base import BackendAdapter, UnknownBackendError
from .gemini import GeminiAdapter
from .http import HTTP_ADAPTERS

logger = get_logger(__name__)


class AdapterRegistry:
    """
    Holds one adapter instance per backend identifier.
    The orchestrator receives a registry instead of switching on provider names.
    """

    def __init__(self) -> None:
        self.adapters: Dict[str, BackendAdapter] = {}

    def register(self, backend_id: str, adapter: BackendAdapter) -> None:
        """Register (or replace) the adapter for an id."""
        previous = self.adapters.get(backend_id)
        if previous is not None and previous is not adapter:
            previous.close()
        self.adapters[backend_id] = adapter
        logger.info("adapter_registered", backend=backend_id)

    def unregister(self, backend_id: str) -> None:
        adapter = self.adapters.pop(backend_id, None)
        if adapter is not None:
            adapter.close()

    def get(self, backend_id: str) -> Optional[BackendAdapter]:
        """Get adapter by id."""
        return self.adapters.get(backend_id)

    def require(self, backend_id: str) -> BackendAdapter:
        """Get adapter by id, raising UnknownBackendError when absent."""
        adapter = self.adapters.get(backend_id)
        if adapter is None:
            raise UnknownBackendError(
                f"Unknown backend: {backend_id!r} (registered: {', '.join(self.list_ids()) or 'none'})",
                backend_id,
            )
        return adapter

    def list_ids(self) -> List[str]:
        return sorted(self.adapters)

    def __contains__(self, backend_id: object) -> bool:
        return backend_id in self.adapters

    def close(self) -> None:
        """Close every registered adapter."""
        for adapter in self.adapters.values():
            adapter.close()


def adapter_config(settings: Settings, provider: ProviderId) -> AdapterConfig:
    """Build the adapter config for one provider from settings."""
    keys = {
        ProviderId.CLAUDE: (settings.anthropic_api_key, settings.anthropic_base_url),
        ProviderId.OPENAI: (settings.openai_api_key, settings.openai_base_url),
        ProviderId.GEMINI: (settings.gemini_api_key, ""),
        ProviderId.MINIMAX: (settings.minimax_api_key, settings.minimax_base_url),
        ProviderId.ZHIPU: (settings.zhipu_api_key, settings.zhipu_base_url),
    }
    api_key, base_url = keys[provider]

    # The model override only applies to the configured backend
    model = settings.model if settings.model and settings.backend == provider.value else ""

    return AdapterConfig(
        provider=provider,
        api_key=api_key,
        base_url=base_url,
        model=model,
        temperature=settings.temperature,
        max_tokens=settings.max_output_tokens,
        timeout=settings.backend_timeout,
        breaker_fail_max=settings.breaker_fail_max,
        breaker_reset_timeout=settings.breaker_reset_timeout,
    )


def create_adapter(config: AdapterConfig) -> BackendAdapter:
    """Instantiate the adapter class for a provider."""
    if config.provider == ProviderId.GEMINI:
        return GeminiAdapter(config)
    return HTTP_ADAPTERS[config.provider](config)


def build_default_registry(settings: Settings) -> AdapterRegistry:
    """
    Register an adapter for every provider that has credentials.

    The configured backend is always registered so that requests fail at the
    provider with its own error text rather than as an unknown backend.
    """
    registry = AdapterRegistry()
    for provider in PROVIDERS:
        config = adapter_config(settings, provider)
        if config.api_key or provider.value == settings.backend:
            registry.register(provider.value, create_adapter(config))

    if not registry.list_ids():
        logger.warning("no_adapters_registered", backend=settings.backend)
    return registry
