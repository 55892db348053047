"""
Client modules for completion backend communication
"""

from .base import (
    BackendAdapter,
    BackendError,
    BackendTransportError,
    Completion,
    UnknownBackendError,
    Usage,
)
from .gemini import GeminiAdapter
from .http import AnthropicAdapter, HTTPBackendAdapter, MiniMaxAdapter, OpenAIAdapter, ZhipuAdapter
from .registry import AdapterRegistry, build_default_registry, create_adapter

__all__ = [
    "BackendAdapter",
    "BackendError",
    "BackendTransportError",
    "Completion",
    "UnknownBackendError",
    "Usage",
    "GeminiAdapter",
    "HTTPBackendAdapter",
    "AnthropicAdapter",
    "OpenAIAdapter",
    "MiniMaxAdapter",
    "ZhipuAdapter",
    "AdapterRegistry",
    "build_default_registry",
    "create_adapter",
]
