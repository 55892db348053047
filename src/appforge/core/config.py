"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="APPFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # HTTP server
    http_host: str = Field(default="0.0.0.0", description="HTTP bind address")
    http_port: int = Field(default=8080, gt=0, description="HTTP port")

    # Backend selection
    backend: str = Field(default="claude", description="Backend id serving every call of a request")
    model: str | None = Field(default=None, description="Model override (provider default if unset)")
    backend_timeout: float = Field(default=60.0, gt=0, description="Per-call deadline in seconds")
    max_output_tokens: int = Field(default=8192, gt=0, description="Max output tokens per call")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")

    # Provider credentials
    anthropic_api_key: str = Field(default="", description="Anthropic API key")
    openai_api_key: str = Field(default="", description="OpenAI API key")
    gemini_api_key: str = Field(default="", description="Google Gemini API key")
    minimax_api_key: str = Field(default="", description="MiniMax API key")
    zhipu_api_key: str = Field(default="", description="Zhipu (GLM) API key")

    # Provider endpoints
    anthropic_base_url: str = Field(default="https://api.anthropic.com/v1")
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    minimax_base_url: str = Field(default="https://api.minimax.chat/v1")
    zhipu_base_url: str = Field(default="https://open.bigmodel.cn/api/paas/v4")

    # Circuit breaker
    breaker_fail_max: int = Field(default=5, gt=0, description="Failures before the breaker opens")
    breaker_reset_timeout: int = Field(default=30, gt=0, description="Seconds before a half-open probe")

    # Generation
    default_stack: str = Field(default="nextjs", description="Web stack when none is requested")
    max_parallel_targets: int = Field(default=4, gt=0, description="Emitter thread pool size")
    max_prompt_length: int = Field(default=10_000, gt=0, description="Max request prompt length")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
