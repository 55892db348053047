"""Handlers for HTTP requests."""

from .generation import GenerationHandler

__all__ = ["GenerationHandler"]
