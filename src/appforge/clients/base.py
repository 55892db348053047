"""
Backend Adapter Contract
Uniform interface over remote text-completion backends.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict


class BackendError(Exception):
    """A backend call failed."""

    def __init__(self, message: str, backend: str = "", original: Exception | None = None) -> None:
        super().__init__(message)
        self.backend = backend
        self.original = original


class BackendTransportError(BackendError):
    """No response at all: timeout, connection failure, rejected request, open breaker."""

    pass


class UnknownBackendError(BackendError):
    """Backend id not present in the adapter registry."""

    pass


class Usage(BaseModel):
    """Token accounting reported by a backend."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )

    @classmethod
    def combine(cls, usages: Iterable["Usage | None"]) -> "Usage | None":
        """Sum the reported usages. None when nothing was reported."""
        reported = [u for u in usages if u is not None]
        if not reported:
            return None
        total = reported[0]
        for usage in reported[1:]:
            total = total + usage
        return total


class Completion(BaseModel):
    """Result of one backend call."""

    model_config = ConfigDict(frozen=True)

    text: str
    usage: Usage | None = None
    model_used: str


class BackendAdapter(ABC):
    """
    One adapter instance per backend identifier.

    Implementations make exactly one provider call per ``complete`` and never
    retry, cache, or rate-limit.
    """

    backend_id: str = ""
    default_system_prompt = "You are an expert mobile app developer."

    @property
    @abstractmethod
    def model(self) -> str:
        """Model served when no hint is given."""
        pass

    @abstractmethod
    def complete(
        self,
        prompt: str,
        system: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> Completion:
        """
        Run one completion.

        Args:
            prompt: User prompt
            system: Optional system instructions
            model: Optional model override
            max_tokens: Optional output cap

        Returns:
            Generated text, usage if reported, and the model that served it

        Raises:
            BackendTransportError: If no response could be obtained
        """
        pass

    def close(self) -> None:
        """Release transport resources (optional override)."""
        pass
