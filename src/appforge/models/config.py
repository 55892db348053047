"""
Provider configuration with strong typing.
Catalog of supported completion backends and per-adapter settings.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProviderId(str, Enum):
    """Supported completion backends."""

    CLAUDE = "claude"
    OPENAI = "openai"
    GEMINI = "gemini"
    MINIMAX = "minimax"
    ZHIPU = "zhipu"


class ProviderInfo(BaseModel):
    """Display metadata for a provider."""

    model_config = ConfigDict(frozen=True)

    id: ProviderId
    name: str
    description: str
    models: tuple[str, ...]
    default_model: str


PROVIDERS: dict[ProviderId, ProviderInfo] = {
    ProviderId.CLAUDE: ProviderInfo(
        id=ProviderId.CLAUDE,
        name="Claude",
        description="Anthropic's Claude - Excellent for code generation",
        models=("claude-sonnet-4-5", "claude-opus-4-1"),
        default_model="claude-sonnet-4-5",
    ),
    ProviderId.OPENAI: ProviderInfo(
        id=ProviderId.OPENAI,
        name="OpenAI",
        description="GPT-4o - Most popular AI model",
        models=("gpt-4o", "gpt-4o-mini", "gpt-4-turbo"),
        default_model="gpt-4o",
    ),
    ProviderId.GEMINI: ProviderInfo(
        id=ProviderId.GEMINI,
        name="Google Gemini",
        description="Gemini 2.0 - Google's latest AI",
        models=("gemini-2.0-flash", "gemini-2.0-flash-lite", "gemini-1.5-pro"),
        default_model="gemini-2.0-flash",
    ),
    ProviderId.MINIMAX: ProviderInfo(
        id=ProviderId.MINIMAX,
        name="MiniMax",
        description="MiniMax AI - Fast and cost-effective",
        models=("abab6.5s", "abab6.5g"),
        default_model="abab6.5s",
    ),
    ProviderId.ZHIPU: ProviderInfo(
        id=ProviderId.ZHIPU,
        name="Z.ai",
        description="Zhipu AI (GLM)",
        models=("glm-4", "glm-4-flash"),
        default_model="glm-4",
    ),
}


def get_provider(provider: ProviderId | str) -> ProviderInfo:
    """Look up provider metadata. Raises ValueError for unknown ids."""
    return PROVIDERS[ProviderId(provider)]


class AdapterConfig(BaseModel):
    """Type-safe settings for one adapter instance."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderId
    api_key: str = Field(default="", repr=False)
    base_url: str = ""
    model: str = ""
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=8192, ge=1)
    timeout: float = Field(default=60.0, gt=0)
    breaker_fail_max: int = Field(default=5, gt=0)
    breaker_reset_timeout: int = Field(default=30, gt=0)

    @property
    def resolved_model(self) -> str:
        """Configured model, or the provider's default."""
        return self.model or get_provider(self.provider).default_model

    def model_copy_with_updates(self, **updates) -> "AdapterConfig":
        """Create updated config (immutable pattern)."""
        data = self.model_dump()
        data.update(updates)
        return AdapterConfig(**data)
