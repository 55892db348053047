"""Fast, type-safe JSON parsing with multiple backends."""

from typing import Any
import json

import msgspec
import orjson
from json_repair import repair_json


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


def strip_code_fence(text: str) -> str:
    """
    Remove a surrounding markdown code fence (```json ... ```).

    Args:
        text: Raw model output

    Returns:
        Text inside the first fence, or the stripped input when there is none
    """
    working_text = text.strip()
    if "```" not in working_text:
        return working_text

    if "```json" in working_text:
        start_marker = working_text.find("```json") + 7
    else:
        start_marker = working_text.find("```") + 3

    end_marker = working_text.find("```", start_marker)
    if end_marker == -1:
        return working_text[start_marker:].strip()
    return working_text[start_marker:end_marker].strip()


def find_balanced_object(text: str) -> str | None:
    """
    Find the first balanced ``{...}`` substring.

    Braces inside JSON string literals are ignored, so prose such as
    ``Here you go: {"a": "}"} hope it helps`` yields ``{"a": "}"}``.

    Args:
        text: Text potentially containing a JSON object

    Returns:
        The substring, or None when the first opening brace never closes
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    return None


def parse_object(text: str) -> dict[str, Any]:
    """
    Strictly decode a JSON object. No extraction, no repair.

    Args:
        text: JSON text

    Returns:
        Parsed dictionary

    Raises:
        JSONParseError: If text is not a JSON object
    """
    try:
        result = msgspec.json.decode(text.encode("utf-8"))
    except RecursionError as e:
        raise JSONParseError("JSON nesting too deep", e) from e
    except msgspec.DecodeError:
        try:
            result = json.loads(text)
        except RecursionError as e:
            raise JSONParseError("JSON nesting too deep", e) from e
        except json.JSONDecodeError as e:
            raise JSONParseError(f"Invalid JSON: {e}", e) from e

    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result


def extract_json(text: str, repair: bool = True) -> dict[str, Any]:
    """
    Extract and parse JSON from text with automatic extraction and multiple fallbacks.

    Args:
        text: Text containing JSON
        repair: Attempt to repair invalid JSON with json_repair

    Returns:
        Parsed JSON dictionary

    Raises:
        JSONParseError: If parsing fails
    """
    candidate = find_balanced_object(strip_code_fence(text))
    if candidate is None:
        raise JSONParseError("No JSON object found in text")

    try:
        return parse_object(candidate)
    except JSONParseError:
        if not repair:
            raise

    # Last resort: try json_repair
    try:
        repaired = repair_json(candidate)
        result = json.loads(repaired)
    except Exception as repair_error:
        raise JSONParseError(f"JSON repair failed: {repair_error}", repair_error) from repair_error

    if not isinstance(result, dict):
        raise JSONParseError(f"Expected dict, got {type(result).__name__}")
    return result


def safe_json_dumps(obj: Any, **kwargs: Any) -> str:
    """
    Encode object to JSON string using fastest available library.

    Args:
        obj: Object to encode
        **kwargs: Additional arguments (indent, etc.)

    Returns:
        JSON string
    """
    indent = kwargs.get("indent", 0)

    if indent == 2:
        try:
            return orjson.dumps(obj, option=orjson.OPT_INDENT_2).decode("utf-8")
        except (TypeError, ValueError):
            pass

    if indent == 0:
        try:
            return orjson.dumps(obj).decode("utf-8")
        except (TypeError, ValueError):
            # Fallback for edge cases (e.g., integers outside 64-bit range)
            pass

        try:
            return msgspec.json.encode(obj).decode("utf-8")
        except (TypeError, ValueError):
            pass

    return json.dumps(obj, indent=indent if indent > 0 else None, default=str)
