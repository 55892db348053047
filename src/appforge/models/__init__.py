"""
Models package - completion backend catalog.
Provider metadata and per-adapter configuration.
"""

from .config import PROVIDERS, AdapterConfig, ProviderId, ProviderInfo, get_provider

__all__ = [
    "PROVIDERS",
    "AdapterConfig",
    "ProviderId",
    "ProviderInfo",
    "get_provider",
]
