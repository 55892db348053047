"""Input validation with strong typing."""

from typing import Any

from pydantic import BaseModel, ConfigDict


# Validation limits
MAX_MODEL_JSON_SIZE = 1024 * 1024  # 1MB
MAX_JSON_DEPTH = 32
MAX_PROMPT_LENGTH = 10_000


class ValidationError(Exception):
    """Validation failed."""

    pass


class UnknownIdentifierError(ValidationError):
    """A caller-supplied identifier (target, stack, template) is not recognized."""

    kind = "identifier"

    def __init__(self, identifier: str, known: list[str] | None = None) -> None:
        self.identifier = identifier
        self.known = known or []
        message = f"Unknown {self.kind}: {identifier!r}"
        if self.known:
            message += f" (expected one of: {', '.join(self.known)})"
        super().__init__(message)


class UnknownTargetError(UnknownIdentifierError):
    """Target id not in the supported set."""

    kind = "target"


class RequestValidator(BaseModel):
    """Base validator with strict configuration."""

    model_config = ConfigDict(
        validate_assignment=True, extra="forbid", frozen=True  # Immutable by default
    )


def validate_json_size(data: str, max_size: int, name: str = "JSON") -> None:
    """
    Validate JSON size to prevent DoS attacks.

    Args:
        data: JSON string to validate
        max_size: Maximum allowed size in bytes
        name: Name for error messages

    Raises:
        ValidationError: If size exceeds limit
    """
    size = len(data.encode("utf-8"))
    if size > max_size:
        raise ValidationError(f"{name} size {size} bytes exceeds maximum {max_size} bytes")


def validate_json_depth(obj: Any, max_depth: int = MAX_JSON_DEPTH, current_depth: int = 0) -> None:
    """
    Validate JSON nesting depth to prevent stack overflow.

    Args:
        obj: Object to validate
        max_depth: Maximum allowed nesting depth
        current_depth: Current depth (internal)

    Raises:
        ValidationError: If depth exceeds limit
    """
    if current_depth > max_depth:
        raise ValidationError(f"JSON nesting depth {current_depth} exceeds maximum {max_depth}")

    if isinstance(obj, dict):
        for value in obj.values():
            validate_json_depth(value, max_depth, current_depth + 1)
    elif isinstance(obj, list):
        for item in obj:
            validate_json_depth(item, max_depth, current_depth + 1)
