"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .validate import (
    ValidationError,
    UnknownIdentifierError,
    UnknownTargetError,
    RequestValidator,
    validate_json_size,
    validate_json_depth,
)
from .logging_config import configure_logging, get_logger, LogContext
from .json import (
    extract_json,
    find_balanced_object,
    parse_object,
    safe_json_dumps,
    strip_code_fence,
    JSONParseError,
)
from .id import new_app_id, new_generation_id, new_request_id
from .store import Store, MemoryStore
from .tracing import init_tracer, trace_operation, get_trace_id, set_trace_context


def create_container(settings: Settings | None = None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Validation
    "ValidationError",
    "UnknownIdentifierError",
    "UnknownTargetError",
    "RequestValidator",
    "validate_json_size",
    "validate_json_depth",
    # Logging
    "configure_logging",
    "get_logger",
    "LogContext",
    # JSON
    "extract_json",
    "find_balanced_object",
    "parse_object",
    "safe_json_dumps",
    "strip_code_fence",
    "JSONParseError",
    # IDs
    "new_app_id",
    "new_generation_id",
    "new_request_id",
    # Storage
    "Store",
    "MemoryStore",
    # Tracing
    "init_tracer",
    "trace_operation",
    "get_trace_id",
    "set_trace_context",
    # DI
    "create_container",
]
